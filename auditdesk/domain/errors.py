"""Domain-level error types shared by the schema, view models and app layer.

``ValidationError`` is the only error that crosses the construction boundary.
It carries one :class:`FieldIssue` per violated constraint so presentation
code can show field-level messages without knowing about pydantic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

from pydantic import ValidationError as PydanticValidationError


@dataclass(frozen=True)
class FieldIssue:
    """One violated constraint, addressed by a dotted payload path."""

    path: str
    """Dotted path into the payload, e.g. ``filters.dateRange.endDate``."""
    reason: str
    """Human-readable explanation of the violation."""

    def __str__(self) -> str:
        return f"{self.path or '<root>'}: {self.reason}"


class ValidationError(ValueError):
    """A payload violated a view-state or filter schema constraint."""

    def __init__(self, issues: Iterable[FieldIssue]):
        self.issues: List[FieldIssue] = list(issues)
        super().__init__("; ".join(str(issue) for issue in self.issues) or "Invalid payload.")

    def messages(self) -> Dict[str, str]:
        """Return ``path -> reason`` (first reason wins per path)."""
        result: Dict[str, str] = {}
        for issue in self.issues:
            result.setdefault(issue.path, issue.reason)
        return result

    @classmethod
    def single(cls, path: str, reason: str) -> "ValidationError":
        return cls([FieldIssue(path=path, reason=reason)])

    @classmethod
    def from_pydantic(
        cls, exc: PydanticValidationError, *, prefix: Sequence[Union[str, int]] = ()
    ) -> "ValidationError":
        """Translate pydantic's error list into domain field issues."""
        issues = [
            FieldIssue(path=_join_path([*prefix, *error.get("loc", ())]), reason=_reason(error))
            for error in exc.errors()
        ]
        return cls(issues)


def _join_path(parts: Iterable[Union[str, int]]) -> str:
    return ".".join(str(part) for part in parts)


def _reason(error: Mapping[str, Any]) -> str:
    message = str(error.get("msg") or "Invalid value")
    # model_validator errors raised as ValueError are prefixed by pydantic
    prefix = "Value error, "
    if message.startswith(prefix):
        message = message[len(prefix):]
    return message


__all__ = ["FieldIssue", "ValidationError"]
