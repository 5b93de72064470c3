"""
Transient/fatal triage for failed generation calls.

A failure is transient when the backend is saturated (rate limited, overloaded,
out of quota); the orchestrator then moves on to the next model. Anything else
is fatal. New provider vocabularies are added as `TransientSignature` rows.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Pattern, Tuple, Union

from .exceptions import ProviderError
from .outcomes import Classification, ErrorInfo

@dataclass(frozen=True)
class TransientSignature:
    name: str
    statuses: Tuple[int, ...] = ()
    patterns: Tuple[str, ...] = ()
    _compiled: Tuple[Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        compiled = tuple(re.compile(p, re.IGNORECASE) for p in self.patterns)
        object.__setattr__(self, "_compiled", compiled)

    def matches(self, message: str, status: Optional[int]) -> bool:
        if status is not None and status in self.statuses:
            return True
        return any(rx.search(message) for rx in self._compiled)

TRANSIENT_SIGNATURES: Tuple[TransientSignature, ...] = (
    TransientSignature(
        name="too_many_requests",
        statuses=(429,),
        patterns=(r"\b429\b", r"too many requests", r"rate[ _-]?limit"),
    ),
    TransientSignature(
        name="service_unavailable",
        statuses=(503,),
        patterns=(r"\b503\b", r"service unavailable", r"\bUNAVAILABLE\b", r"\boverloaded\b"),
    ),
    TransientSignature(
        name="resource_exhausted",
        patterns=(r"RESOURCE_EXHAUSTED", r"resource (has been )?exhausted", r"\bquota\b"),
    ),
)

Cause = Union[BaseException, str]

def _signal(cause: Cause) -> Tuple[str, Optional[int]]:
    if isinstance(cause, ProviderError):
        return cause.message, cause.status
    if isinstance(cause, BaseException):
        status = getattr(cause, "status_code", None) or getattr(cause, "status", None)
        return str(cause), status if isinstance(status, int) else None
    return str(cause), None

class FailureClassifier:
    def __init__(self, signatures: Iterable[TransientSignature] = TRANSIENT_SIGNATURES):
        self.signatures = tuple(signatures)

    @classmethod
    def with_extra_patterns(cls, patterns: Iterable[str]) -> "FailureClassifier":
        patterns = tuple(p for p in patterns if p)
        if not patterns:
            return cls()
        extra = TransientSignature(name="configured", patterns=patterns)
        return cls(TRANSIENT_SIGNATURES + (extra,))

    def classify(self, cause: Cause) -> Classification:
        message, status = _signal(cause)
        for signature in self.signatures:
            if signature.matches(message, status):
                return Classification.TRANSIENT
        return Classification.FATAL

    def describe(self, cause: Cause, model: Optional[str] = None) -> ErrorInfo:
        message, status = _signal(cause)
        return ErrorInfo(
            message=message,
            classification=self.classify(cause),
            status=status,
            model=model,
        )

_default = FailureClassifier()

def classify(cause: Cause) -> Classification:
    return _default.classify(cause)
