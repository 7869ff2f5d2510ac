"""Error taxonomy shared by discovery, dispatch and orchestration.

Every error carries a machine-readable ``kind`` so that failures can be
handed back to a calling agent as structured objects instead of raised
exceptions.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class ToolErrorInfo:
    """Structured error returned across the tool boundary."""

    kind: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": self.details}


class ToolkitError(Exception):
    """Base class for all toolsmith-server errors."""

    kind = "internal"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_info(self) -> ToolErrorInfo:
        return ToolErrorInfo(kind=self.kind, message=self.message, details=self.details)


class InvalidArgumentError(ToolkitError):
    """A required argument is missing or has the wrong shape.

    Caller-fixable; never retried automatically.
    """

    kind = "invalid_argument"


class ToolNotFoundError(ToolkitError):
    """The tool name (or the resource it addresses) is unknown."""

    kind = "not_found"


class UpstreamError(ToolkitError):
    """The backend answered with a non-success status."""

    kind = "upstream"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if status_code is not None:
            merged.setdefault("status_code", status_code)
        if code is not None:
            merged.setdefault("code", code)
        super().__init__(message, merged)
        self.status_code = status_code
        self.code = code

    @classmethod
    def from_response(cls, response: httpx.Response) -> "UpstreamError":
        """Build an UpstreamError from a failed backend response.

        The backend reports errors as ``{"error": {"code": ..., "message": ...}}``;
        anything else is surfaced as raw text.
        """
        code = None
        message = f"Backend returned HTTP {response.status_code}"
        details: dict[str, Any] = {}
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            error = payload["error"]
            code = error.get("code")
            message = error.get("message") or message
            inner = error.get("innererror")
            if inner:
                details["innererror"] = inner
        elif response.text:
            details["body"] = response.text[:500]

        return cls(
            message,
            status_code=response.status_code,
            code=code,
            details=details,
        )


class PartialDiscoveryFailure(ToolkitError):
    """One or more discovery categories failed while others succeeded."""

    kind = "partial_discovery"


class CacheWriteError(ToolkitError):
    """Persisting the configuration record failed."""

    kind = "cache_write"
