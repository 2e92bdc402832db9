"""RFC 7807 Problem Details attached to API errors."""

from dataclasses import dataclass
from typing import Any

import httpx

PROBLEM_CONTENT_TYPE = "application/problem+json"
STANDARD_FIELDS = frozenset({"type", "title", "status", "detail", "instance"})


@dataclass(frozen=True)
class ProblemDetail:
    """RFC 7807 Problem Details object.

    See: https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str | None = None
    title: str | None = None
    status: int | None = None
    detail: str | None = None
    instance: str | None = None

    # Non-standard members sent by the API
    extensions: dict[str, Any] | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ProblemDetail | None":
        """Parse problem details from an error response.

        Bodies served as ``application/problem+json`` are always parsed. Plain
        JSON bodies are accepted when they carry at least one standard member.

        Returns:
            ProblemDetail, or None when the body is not a problem document.
        """
        try:
            data = response.json()
        except (ValueError, TypeError, AttributeError):
            return None
        if not isinstance(data, dict):
            return None

        declared = PROBLEM_CONTENT_TYPE in response.headers.get("content-type", "")
        if not declared and not STANDARD_FIELDS.intersection(data):
            return None

        extensions = {k: v for k, v in data.items() if k not in STANDARD_FIELDS}
        return cls(
            type=data.get("type"),
            title=data.get("title"),
            status=data.get("status"),
            detail=data.get("detail"),
            instance=data.get("instance"),
            extensions=extensions or None,
        )

    def to_exception_message(self) -> str:
        """Render the problem as a multi-line exception message."""
        lines = []

        headline = self.title or self.detail
        if headline:
            lines.append(headline)
        if self.title and self.detail and self.title != self.detail:
            lines.append(self.detail)
        if self.type:
            lines.append(f"Problem Type: {self.type}")
        if self.instance:
            lines.append(f"Instance: {self.instance}")
        if self.extensions:
            lines.append("Extension fields:")
            lines.extend(f"  - {key}: {value}" for key, value in self.extensions.items())

        return "\n".join(lines) if lines else "Unknown API error"
