# backend/services/model_gateway.py
"""
Model Gateway

Single entry point for every call to the text-generation model.

Responsibilities:
- Build the chat request from text parts and an optional file attachment
- Retry transient failures (429, 503, connection errors) with exponential backoff
- Pull the text out of the response, strip code fences, parse JSON,
  and fall back to the outermost {...} block when the model adds prose
- Validate the parsed object against the caller's pydantic shape

Nothing here knows about resumes or interviews; see services.analysis.
"""

import re
import json
import time
import base64
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Type, TypeVar, Union

from openai import OpenAI, APIConnectionError, APIStatusError
from pydantic import BaseModel, ValidationError

from errors import ModelGatewayError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

RETRYABLE_STATUS = {429, 503}


@dataclass(frozen=True)
class Attachment:
    """An uploaded file sent alongside the prompt."""
    filename: str
    content_type: str
    data: bytes


Part = Union[str, Attachment]


def is_retryable_error(exc: BaseException) -> bool:
    """Rate limits, service unavailable and transport failures are worth another try."""
    if isinstance(exc, APIConnectionError):  # includes APITimeoutError
        return True
    if isinstance(exc, APIStatusError):
        return exc.status_code in RETRYABLE_STATUS
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to try a call and how long to wait in between.

    Attributes:
        max_attempts: Total attempts, first try included
        base_delay: Seconds to wait before the first retry; doubles each retry
        retryable: Predicate deciding whether an exception is worth retrying
    """
    max_attempts: int = 3
    base_delay: float = 1.0
    retryable: Callable[[BaseException], bool] = is_retryable_error

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> float:
        """Wait after the given 0-based attempt fails."""
        return self.base_delay * (2 ** attempt)


def call_with_policy(
    fn: Callable[[], Any],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep
) -> Any:
    """
    Call fn, retrying per policy.

    Non-retryable exceptions propagate immediately; a retryable one propagates
    once the attempts are used up.
    """
    for attempt in range(policy.max_attempts):
        try:
            return fn()
        except Exception as e:
            last_attempt = attempt == policy.max_attempts - 1
            if last_attempt or not policy.retryable(e):
                raise
            wait = policy.delay_for(attempt)
            logger.warning(
                f"Model call failed ({_describe(e)}). Retrying in {wait:.1f}s... "
                f"(Attempt {attempt + 1}/{policy.max_attempts})"
            )
            sleep(wait)


def _describe(exc: BaseException) -> str:
    status = getattr(exc, "status_code", None)
    return f"HTTP {status}" if status else type(exc).__name__


_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper around the reply; fences inside values are kept."""
    text = _LEADING_FENCE.sub("", text, count=1)
    return _TRAILING_FENCE.sub("", text, count=1).strip()


def extract_json_block(text: str) -> Optional[str]:
    """Return the substring from the first '{' to the last '}', if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


def parse_model_json(text: str) -> Dict[str, Any]:
    """
    Parse model output into a JSON object.

    Strict parse first; on failure, salvage the outermost {...} block.

    Raises:
        ModelGatewayError: if neither yields a JSON object
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning(f"Model response was not clean JSON, salvaging (trunc): {cleaned[:200]}")
        block = extract_json_block(cleaned)
        if block is None:
            raise ModelGatewayError("Model returned a non-JSON response")
        try:
            data = json.loads(block)
        except json.JSONDecodeError:
            raise ModelGatewayError("Model returned a non-JSON response")

    if not isinstance(data, dict):
        raise ModelGatewayError("Model returned JSON that is not an object")
    return data


def attachment_part(attachment: Attachment) -> Optional[Dict[str, Any]]:
    """
    Chat content part for an attachment.

    Only PDFs and images are accepted inline by the provider; anything else
    is left out (its extracted text still goes in as a text part).
    """
    mime = (attachment.content_type or "").lower()
    encoded = base64.b64encode(attachment.data).decode("ascii")

    if mime.startswith("image/"):
        return {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{encoded}"}}
    if "pdf" in mime or attachment.filename.lower().endswith(".pdf"):
        return {
            "type": "file",
            "file": {
                "filename": attachment.filename,
                "file_data": f"data:application/pdf;base64,{encoded}",
            },
        }
    return None


class ModelGateway:
    """
    Wraps the OpenAI chat completions client with retry and JSON handling.

    The SDK's own retries are disabled (max_retries=0) so the RetryPolicy is
    the only retry layer.
    """

    def __init__(
        self,
        client: Optional[OpenAI],
        model: str = "gpt-4o-mini",
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        temperature: float = 0.3
    ):
        self.client = client
        self.model = model
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings) -> "ModelGateway":
        client = None
        if settings.openai_api_key:
            client = OpenAI(api_key=settings.openai_api_key, max_retries=0)
            logger.info("OpenAI client initialized")
        else:
            logger.warning("OPENAI_API_KEY not configured - model calls will fail")

        return cls(
            client,
            model=settings.openai_model,
            policy=RetryPolicy(
                max_attempts=settings.model_max_attempts,
                base_delay=settings.model_backoff_ms / 1000.0,
            ),
        )

    def build_messages(self, parts: Sequence[Part], system: Optional[str] = None) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        for part in parts:
            if isinstance(part, Attachment):
                file_part = attachment_part(part)
                if file_part is None:
                    logger.info(f"Attachment {part.filename} ({part.content_type}) not sent inline")
                    continue
                content.append(file_part)
            elif part:
                content.append({"type": "text", "text": part})

        messages: List[Dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": content})
        return messages

    def complete(self, parts: Sequence[Part], system: Optional[str] = None) -> str:
        """
        Send the request and return the raw text of the first choice.

        Raises:
            ModelGatewayError: on missing key, exhausted retries,
                non-success status, or empty content
        """
        if self.client is None:
            raise ModelGatewayError("OPENAI_API_KEY is not set")

        messages = self.build_messages(parts, system)

        def send():
            return self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=messages,
            )

        try:
            response = call_with_policy(send, self.policy, sleep=self.sleep)
        except APIStatusError as e:
            body = _error_body(e)
            raise ModelGatewayError(
                f"Model request failed: {e.status_code} {body}",
                upstream_status=e.status_code,
                body=body,
            ) from e
        except APIConnectionError as e:
            raise ModelGatewayError(f"Model request failed: {e}") from e

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ModelGatewayError("No model response content")
        return content

    def generate(self, parts: Sequence[Part], schema: Type[T], system: Optional[str] = None) -> T:
        """
        Call the model and return its JSON answer validated as `schema`.

        Raises:
            ModelGatewayError: for any transport, parse or shape failure
        """
        text = self.complete(parts, system)
        data = parse_model_json(text)
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Model JSON did not match {schema.__name__}: {e}")
            raise ModelGatewayError(
                f"Model response did not match {schema.__name__} ({e.error_count()} errors)"
            ) from e


def _error_body(exc: APIStatusError) -> str:
    if exc.body is None:
        return exc.message
    if isinstance(exc.body, str):
        return exc.body
    return json.dumps(exc.body)
