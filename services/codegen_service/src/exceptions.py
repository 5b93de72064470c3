from typing import Optional

from .outcomes import ErrorInfo

class CodegenError(Exception):
    pass

class InputError(CodegenError):
    """Bad inbound request: no prompt, unreadable body. Never retried."""
    pass

class ProviderError(CodegenError):
    """A single generation call failed. `status` is the upstream HTTP status when known."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

class GenerationFailed(CodegenError):
    """Terminal orchestration failure, carrying the cause that ended it."""

    def __init__(self, cause: ErrorInfo):
        super().__init__(cause.message)
        self.cause = cause

    @property
    def model(self) -> Optional[str]:
        return self.cause.model

class FatalProviderError(GenerationFailed):
    """Won't improve by switching models: bad key, unknown model, rejected prompt."""
    pass

class ExhaustionError(GenerationFailed):
    """Every candidate model was overloaded, or there were none to try."""
    pass
