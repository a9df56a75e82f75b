"""FastAPI extraction brain: structured record extraction over an LLM.

Seeds the schema registry, builds prompts, parses and validates the model's
JSON. Delegates inference to an Ollama server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalog import seed_registry
from config import settings
from extraction import ModelCall, ModelCallError, extract
from llm_client import OllamaModelCall
from models import ExtractionReport
from prompts import InvalidRequestError
from schema_registry import Schema, UnknownSchemaError, registry

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_model_call: ModelCall | None = None


class ExtractBody(BaseModel):
    schema_name: str
    source_text: str = ""
    attachment: str | None = None
    instruction: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Seed built-in schemas and connect the model on startup."""
    global _model_call

    added = seed_registry(registry)
    logger.info("Schema registry seeded: %s", ", ".join(added) or "nothing new")

    if not settings.OLLAMA_MODEL:
        logger.info("No model configured (OLLAMA_MODEL is empty), extraction disabled")
        _model_call = None
    else:
        logger.info("Using model %s at %s", settings.OLLAMA_MODEL, settings.OLLAMA_URL)
        client = OllamaModelCall()
        _model_call = client

        # Startup probe (log only)
        health = client.health()
        if health["status"] == "reachable":
            logger.info("Model server is reachable: %s", health)
        else:
            logger.warning("Model server not reachable yet: %s", health)

    yield

    _model_call = None


app = FastAPI(title="Extraction Brain", version="1.0.0", lifespan=lifespan)


@app.post("/api/v1/extract", response_model=ExtractionReport)
def extract_records(body: ExtractBody):
    """Extract schema-shaped records from text or an attached document."""
    if _model_call is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "Extraction is not available - no model configured"},
        )

    try:
        return extract(
            body.schema_name,
            body.source_text,
            _model_call,
            attachment=body.attachment,
            instruction=body.instruction,
        )
    except UnknownSchemaError as e:
        return JSONResponse(status_code=404, content={"detail": str(e)})
    except InvalidRequestError as e:
        return JSONResponse(status_code=400, content={"detail": str(e)})
    except ModelCallError as e:
        logger.error("Model call failed: %s", e)
        return JSONResponse(
            status_code=502,
            content={"detail": e.message, "model_status": e.status},
        )


@app.get("/api/v1/schemas", response_model=list[Schema])
async def list_schemas():
    """Return every registered extraction schema."""
    return registry.schemas()


@app.get("/health")
async def health():
    """Return service status and model availability."""
    base = {
        "status": "healthy",
        "model_available": _model_call is not None,
        "schemas": registry.names(),
    }

    if isinstance(_model_call, OllamaModelCall):
        base["model_health"] = _model_call.health()

    return base


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
