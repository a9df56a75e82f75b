"""Model-call capability backed by an Ollama chat model.

Uses the ollama client library for transport. Attachments are passed
through as ``images`` and resolved by the library. Retries (tenacity,
exponential backoff) apply only to transport failures and are off unless
MODEL_RETRY_ATTEMPTS > 1.
"""

import logging

import httpx
import ollama
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from config import settings
from extraction import ModelCallError
from models import ExtractionRequest

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, ModelCallError) and (
        error.status is None or error.status in RETRYABLE_STATUS
    )


class OllamaModelCall:
    """Callable ``ExtractionRequest -> raw response text`` over an Ollama chat model."""

    def __init__(
        self,
        model: str | None = None,
        host: str | None = None,
        timeout: float | None = None,
        temperature: float | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        retry_backoff: float | None = None,
    ):
        self.model = model or settings.OLLAMA_MODEL
        self._temperature = temperature if temperature is not None else settings.MODEL_TEMPERATURE
        self._retry_attempts = retry_attempts if retry_attempts is not None else settings.MODEL_RETRY_ATTEMPTS
        self._retry_delay = retry_delay if retry_delay is not None else settings.MODEL_RETRY_DELAY
        self._retry_backoff = retry_backoff if retry_backoff is not None else settings.MODEL_RETRY_BACKOFF

        self._client = ollama.Client(
            host=host or settings.OLLAMA_URL,
            timeout=timeout if timeout is not None else settings.MODEL_TIMEOUT_SECONDS,
        )

    def __call__(self, request: ExtractionRequest) -> str:
        message = {"role": "user", "content": request.prompt}
        if request.attachment is not None:
            message["images"] = [request.attachment]

        return self._chat_with_retry([message])

    def _chat_with_retry(self, messages: list[dict]) -> str:
        """Retry wrapper, configured dynamically from the constructor arguments."""

        @retry(
            retry=retry_if_exception(is_retryable),
            stop=stop_after_attempt(max(1, self._retry_attempts)),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                exp_base=self._retry_backoff,
                max=120,
            ),
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "Model call failed, retrying in %.1fs (attempt %d/%d)",
                state.next_action.sleep,  # type: ignore[union-attr]
                state.attempt_number,
                self._retry_attempts,
            ),
        )
        def _do_chat() -> str:
            return self._send_chat(messages)

        return _do_chat()

    def _send_chat(self, messages: list[dict]) -> str:
        """Send a single chat request to the Ollama server."""
        try:
            response = self._client.chat(
                model=self.model,
                messages=messages,
                options={"temperature": self._temperature},
            )
        except ollama.ResponseError as e:
            logger.error("Model %s returned error %d: %s", self.model, e.status_code, e.error)
            raise ModelCallError(e.status_code, e.error) from e
        except ConnectionError as e:
            logger.warning("Cannot connect to Ollama: %s", e)
            raise ModelCallError(None, f"Cannot connect to model server: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("Model server HTTP error: %s", e)
            raise ModelCallError(None, f"Model server HTTP error: {e}") from e
        except (ollama.RequestError, ValueError) as e:
            # Raised client-side before sending, e.g. an attachment path that does not exist
            logger.error("Model request rejected by client: %s", e)
            raise ModelCallError(400, f"Invalid model request: {e}") from e

        return response["message"]["content"] or ""

    def health(self) -> dict:
        """Check that the model server answers. Returns a status dict, never raises."""
        try:
            self._client.list()
            return {"status": "reachable", "model": self.model}
        except Exception as e:
            logger.warning("Model server health check failed: %s", e)
            return {"status": "unreachable", "model": self.model, "error": str(e)}
