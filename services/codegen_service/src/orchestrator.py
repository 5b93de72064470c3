from typing import Callable, Optional

from .classifier import FailureClassifier
from .exceptions import ProviderError
from .extractor import extract_code
from .logging import jlog
from .outcomes import (
    AttemptFailure,
    AttemptSuccess,
    Classification,
    ErrorInfo,
    ExhaustedFailure,
    FatalFailure,
    GenerationAttemptResult,
    GenerationRequest,
    GenerationSuccess,
    OrchestrationOutcome,
)
from .prompt import wrap_prompt
from .provider import GenerationProvider

NO_CANDIDATES = "No candidate models available"

class GenerationOrchestrator:
    """
    Walks the candidate list front to back, one provider call at a time.

    A transient failure moves the cursor to the next candidate; success or a
    fatal failure ends the walk where it stands. The instance keeps no
    per-request state, so one orchestrator serves concurrent requests.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        classifier: Optional[FailureClassifier] = None,
        language: str = "lua",
        prompt_template: Optional[str] = None,
        extractor: Callable[[str, str], str] = extract_code,
    ) -> None:
        self.provider = provider
        self.classifier = classifier or FailureClassifier()
        self.language = language
        self.prompt_template = prompt_template
        self.extractor = extractor

    def _attempt(self, model: str, prompt: str) -> GenerationAttemptResult:
        try:
            raw_text = self.provider.generate(model, prompt)
        except ProviderError as e:
            return AttemptFailure(model_used=model, cause=self.classifier.describe(e, model=model))
        return AttemptSuccess(model_used=model, raw_text=raw_text)

    def orchestrate(self, request: GenerationRequest) -> OrchestrationOutcome:
        candidates = request.candidates
        total = len(candidates)
        prompt = wrap_prompt(request.prompt, self.prompt_template)

        last_cause: Optional[ErrorInfo] = None
        cursor = 0
        while cursor < total:
            model = candidates[cursor]
            attempt_no = cursor + 1
            jlog(event="generation_attempt", attempt=attempt_no, total=total, model_name=model)

            result = self._attempt(model, prompt)
            if isinstance(result, AttemptSuccess):
                code = self.extractor(result.raw_text, self.language)
                return GenerationSuccess(model_used=model, extracted_code=code, attempts=attempt_no)

            cause = result.cause
            if cause.classification is Classification.FATAL:
                jlog(
                    event="generation_fatal",
                    severity="ERROR",
                    attempt=attempt_no,
                    model_name=model,
                    status=cause.status,
                    error=cause.message,
                )
                return FatalFailure(cause=cause, model_used=model, attempts=attempt_no)

            jlog(
                event="generation_fallback",
                severity="WARNING",
                attempt=attempt_no,
                model_name=model,
                status=cause.status,
                error=cause.message,
                next_model=candidates[cursor + 1] if attempt_no < total else None,
            )
            last_cause = cause
            cursor += 1

        if last_cause is None:
            last_cause = ErrorInfo(message=NO_CANDIDATES, classification=Classification.FATAL)
        jlog(event="generation_exhausted", severity="ERROR", attempts=cursor, error=last_cause.message)
        return ExhaustedFailure(last_cause=last_cause, attempts=cursor)
