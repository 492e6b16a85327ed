"""Caller-facing response envelopes."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from core.decode import StructuredBody, decode_body
from core.exceptions import RequestValidationError, UpstreamError
from core.request_types import Timing, UpstreamResult


class TimingInfo(BaseModel):
    start: int
    end: int
    duration: str

    @classmethod
    def from_timing(cls, timing: Timing) -> "TimingInfo":
        return cls(**timing.as_dict())


class SuccessEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    status: int
    status_text: str = Field(alias="statusText")
    headers: dict[str, str]
    data: Any
    timing: TimingInfo


class FailureEnvelope(BaseModel):
    success: bool = False
    error: str
    code: str
    timing: TimingInfo


class ValidationFailure(BaseModel):
    error: str
    code: str
    hint: str | None = None
    url: str | None = None
    timing: TimingInfo | None = None


class ResponseTranslator:
    """Build envelopes from upstream results and failures."""

    def success(self, result: UpstreamResult) -> tuple[int, dict[str, Any]]:
        """Envelope a successful upstream exchange; status mirrors upstream.

        Raises:
            ResponseDecodeError: the body claims JSON but does not parse
        """
        decoded = decode_body(result.content_type, result.content, result.encoding)
        data = decoded.value if isinstance(decoded, StructuredBody) else decoded.text
        envelope = SuccessEnvelope(
            status=result.status,
            status_text=result.status_text,
            headers=relay_headers(result.headers),
            data=data,
            timing=TimingInfo.from_timing(result.timing),
        )
        return result.status, envelope.model_dump(by_alias=True)

    def failure(self, error: UpstreamError, timing: Timing) -> tuple[int, dict[str, Any]]:
        envelope = FailureEnvelope(
            error=error.kind.describe(error.message),
            code=error.code,
            timing=TimingInfo.from_timing(timing),
        )
        return error.kind.status, envelope.model_dump()

    def validation_failure(
        self,
        error: RequestValidationError,
        timing: Timing | None = None,
    ) -> tuple[int, dict[str, Any]]:
        envelope = ValidationFailure(
            error=error.message,
            code=error.code,
            hint=error.hint,
            url=error.url,
            timing=TimingInfo.from_timing(timing) if timing else None,
        )
        return 400, envelope.model_dump(exclude_none=True)


def relay_headers(headers: list[tuple[str, str]]) -> dict[str, str]:
    """Copy every upstream header; repeated names are joined with ', '."""
    relayed: dict[str, str] = {}
    for name, value in headers:
        relayed[name] = f"{relayed[name]}, {value}" if name in relayed else value
    return relayed
