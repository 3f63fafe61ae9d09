"""
Analysis Service Client.

Sends the bundled source context to the analysis service and parses the
node/edge payload it returns. Transport failures are mapped onto the
AnalysisError hierarchy so callers can tell a timeout from a rejection
from a garbled answer.
"""

import json
import logging
from http import client as http_client
from typing import Any, List, Optional
from urllib import error, request

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT_SEC
from ..core.exceptions import (
    AnalysisRejectedError,
    AnalysisTimeoutError,
    MalformedResponseError,
    PayloadTooLargeError,
)

logger = logging.getLogger(__name__)


class AnalysisResponse(BaseModel):
    """
    The service's answer. Node and edge entries stay raw: normalization
    owns their validation.
    """

    model_config = ConfigDict(extra="ignore")

    summary: str = ""
    suggestions: List[str] = Field(default_factory=list)
    nodes: List[Any] = Field(default_factory=list)
    edges: List[Any] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_or_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("nodes", "edges", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("suggestions", mode="before")
    @classmethod
    def _strings_only(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str)]
        return value


def strip_code_fences(text: str) -> str:
    """Remove markdown ```json fences the model sometimes adds."""
    return text.replace("```json", "").replace("```", "").strip()


def parse_response(text: str) -> AnalysisResponse:
    """
    Parse a raw response body.

    Raises:
        MalformedResponseError: If the body is empty or not a JSON object
            of the expected shape.
    """
    body = strip_code_fences(text)
    if not body:
        raise MalformedResponseError("Analysis response is empty")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Analysis response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Analysis response must be a JSON object, got {type(data).__name__}"
        )

    try:
        return AnalysisResponse.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Analysis response has an unexpected shape: {e}") from e


class AnalysisClient:
    """
    Blocking HTTP client for the analysis endpoint.
    """

    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, timeout: float = DEFAULT_TIMEOUT_SEC):
        self.endpoint = endpoint
        self.timeout = timeout

    def analyze(self, full_context: str) -> AnalysisResponse:
        """
        POST the context and return the parsed payload.

        Raises:
            AnalysisTimeoutError: The service did not answer in time.
            PayloadTooLargeError: The service rejected the body size (413).
            AnalysisRejectedError: Any other error status, or no connection.
            MalformedResponseError: The body could not be parsed.
        """
        body = json.dumps({"fullContext": full_context}).encode("utf-8")
        req = request.Request(
            self.endpoint,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )

        logger.info(f"Requesting analysis of {len(body)} bytes from {self.endpoint}")

        try:
            with request.urlopen(req, timeout=self.timeout) as resp:
                payload = resp.read()
        except error.HTTPError as e:
            message = _service_error_message(e)
            if e.code == 413:
                raise PayloadTooLargeError(message) from e
            raise AnalysisRejectedError(message, status=e.code) from e
        except error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise AnalysisTimeoutError(
                    f"Analysis timed out after {self.timeout:g}s"
                ) from e
            raise AnalysisRejectedError(f"Analysis service unreachable: {e.reason}") from e
        except TimeoutError as e:
            raise AnalysisTimeoutError(f"Analysis timed out after {self.timeout:g}s") from e
        except (OSError, http_client.HTTPException) as e:
            # Connection dropped while the body was being read
            raise AnalysisRejectedError(f"Analysis response could not be read: {e!r}") from e

        try:
            raw = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedResponseError(f"Analysis response is not valid UTF-8: {e}") from e

        return parse_response(raw)


def _service_error_message(exc: error.HTTPError) -> str:
    """Prefer the service's own `error` field over the HTTP reason."""
    fallback = f"Analysis request failed ({exc.code} {exc.reason})"
    try:
        payload: Optional[Any] = json.loads(exc.read().decode("utf-8") or "null")
    except Exception:
        # Body missing or not JSON
        return fallback
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return payload["error"]
    return fallback
