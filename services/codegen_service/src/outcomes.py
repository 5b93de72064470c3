"""Data model for one generation request and the attempts made on its behalf."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

# Opaque backend model identifier, e.g. "gemini-2.5-flash"
ModelCandidate = str

class Classification(str, Enum):
    TRANSIENT = "transient"
    FATAL = "fatal"

@dataclass(frozen=True)
class ErrorInfo:
    message: str
    classification: Classification
    status: Optional[int] = None
    model: Optional[ModelCandidate] = None

    @property
    def transient(self) -> bool:
        return self.classification is Classification.TRANSIENT

@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    candidates: Tuple[ModelCandidate, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Freeze whatever sequence the caller handed in
        object.__setattr__(self, "candidates", tuple(self.candidates))

# --- per-attempt results ---

@dataclass(frozen=True)
class AttemptSuccess:
    model_used: ModelCandidate
    raw_text: str

@dataclass(frozen=True)
class AttemptFailure:
    model_used: ModelCandidate
    cause: ErrorInfo

GenerationAttemptResult = Union[AttemptSuccess, AttemptFailure]

# --- terminal outcomes ---

@dataclass(frozen=True)
class GenerationSuccess:
    model_used: ModelCandidate
    extracted_code: str
    attempts: int

@dataclass(frozen=True)
class ExhaustedFailure:
    last_cause: ErrorInfo
    attempts: int

@dataclass(frozen=True)
class FatalFailure:
    cause: ErrorInfo
    model_used: ModelCandidate
    attempts: int

OrchestrationOutcome = Union[GenerationSuccess, ExhaustedFailure, FatalFailure]
