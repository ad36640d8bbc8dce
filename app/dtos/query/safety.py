"""
Safety verdict DTO
"""
from typing import Optional
from app.core.errors import ErrorKind
from app.dtos.base import WireModel


class SafetyVerdict(WireModel):
    """
    Outcome of the safety check for one candidate query

    Produced once per query, never cached (LLM output is not stable across calls).
    """
    accepted: bool
    kind: Optional[ErrorKind] = None
    reason: Optional[str] = None

    @classmethod
    def accept(cls) -> "SafetyVerdict":
        return cls(accepted=True)

    @classmethod
    def reject(cls, kind: ErrorKind, reason: str) -> "SafetyVerdict":
        return cls(accepted=False, kind=kind, reason=reason)

    @property
    def rejected(self) -> bool:
        return not self.accepted
