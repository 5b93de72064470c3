import hashlib
from typing import Optional

from opentelemetry import trace

from .classifier import FailureClassifier
from .config import settings
from .exceptions import ExhaustionError, FatalProviderError, InputError
from .logging import jlog
from .orchestrator import GenerationOrchestrator
from .outcomes import ExhaustedFailure, FatalFailure, GenerationRequest
from .provider import GeminiProvider, GenerationProvider
from .schemas import GenerateRequest, GenerateResponse

tracer = trace.get_tracer("codegen.generate")

# Lazy, process-wide; both are stateless between requests
_provider: Optional[GenerationProvider] = None
_classifier: Optional[FailureClassifier] = None

def _hash_preview(txt: str) -> str:
    return f"sha256={hashlib.sha256(txt.encode('utf-8')).hexdigest()[:12]},len={len(txt)}"

def get_provider() -> GenerationProvider:
    global _provider
    if _provider is None:
        _provider = GeminiProvider(
            api_key=settings.gemini_api_key,
            base_url=settings.provider_base_url,
            timeout_s=settings.provider_timeout_s,
        )
    return _provider

def get_classifier() -> FailureClassifier:
    global _classifier
    if _classifier is None:
        _classifier = FailureClassifier.with_extra_patterns(settings.extra_transient_patterns)
    return _classifier

def build_orchestrator() -> GenerationOrchestrator:
    return GenerationOrchestrator(
        provider=get_provider(),
        classifier=get_classifier(),
        language=settings.code_language,
        prompt_template=settings.prompt_template if settings.wrap_prompt else None,
    )

def generate_code(req: GenerateRequest, correlation_id: Optional[str]) -> GenerateResponse:
    if not req.prompt or not req.prompt.strip():
        raise InputError("No prompt provided")

    candidates = req.models or list(settings.default_models)

    with tracer.start_as_current_span("CodeGeneration") as span:
        span.set_attribute("operation", "code_generation")
        span.set_attribute("candidate_count", len(candidates))
        span.set_attribute("prompt_preview", _hash_preview(req.prompt))
        span.set_attribute("correlation_id", correlation_id or "")

        outcome = build_orchestrator().orchestrate(
            GenerationRequest(prompt=req.prompt, candidates=tuple(candidates))
        )
        span.set_attribute("attempts", outcome.attempts)

        if isinstance(outcome, FatalFailure):
            raise FatalProviderError(outcome.cause)
        if isinstance(outcome, ExhaustedFailure):
            raise ExhaustionError(outcome.last_cause)

        span.set_attribute("model_name", outcome.model_used)
        jlog(
            event="codegen_ok",
            correlation_id=correlation_id,
            model_name=outcome.model_used,
            attempts=outcome.attempts,
            prompt_hash=_hash_preview(req.prompt),
            code_len=len(outcome.extracted_code),
        )
        return GenerateResponse(model=outcome.model_used, clean_code=outcome.extracted_code)
