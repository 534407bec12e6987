"""Request data passed from the HTTP / CLI layer into the PDF pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from utils.error_handler import ValidationError

# Payload keys as sent by the browser extension
PAYLOAD_FIELDS = {
    "title": "problemTitle",
    "difficulty": "problemDifficulty",
    "topics": "problemTopics",
    "link": "problemLink",
    "problem_content": "problemContent",
    "analysis": "analysis",
    "date": "date",
}


@dataclass(frozen=True)
class ProblemMetadata:
    """Structured problem fields shown in the header and metadata box."""

    title: str
    difficulty: str = ""
    topics: str = ""
    link: str = ""


@dataclass(frozen=True)
class RenderRequest:
    """Everything needed for one document; consumed by a single render pass."""

    metadata: ProblemMetadata
    analysis: str
    problem_content: str = ""
    date: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "RenderRequest":
        """Build a request from a JSON body, raising :class:`ValidationError`
        when ``problemTitle`` or ``analysis`` is missing."""
        if not isinstance(payload, Mapping):
            payload = {}

        def _text(key: str) -> str:
            value = payload.get(PAYLOAD_FIELDS[key])
            if value is None:
                return ""
            return value if isinstance(value, str) else str(value)

        request = cls(
            metadata=ProblemMetadata(
                title=_text("title"),
                difficulty=_text("difficulty"),
                topics=_text("topics"),
                link=_text("link"),
            ),
            analysis=_text("analysis"),
            problem_content=_text("problem_content"),
            date=_text("date") or None,
        )
        request.validate()
        return request

    def validate(self) -> None:
        missing = []
        if not self.metadata.title.strip():
            missing.append(PAYLOAD_FIELDS["title"])
        if not self.analysis.strip():
            missing.append(PAYLOAD_FIELDS["analysis"])
        if missing:
            raise ValidationError(
                "Missing required fields: problemTitle and analysis are required",
                missing_fields=missing,
            )
