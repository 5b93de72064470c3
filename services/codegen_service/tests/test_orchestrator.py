import pytest

from services.codegen_service.src.exceptions import ProviderError
from services.codegen_service.src.orchestrator import NO_CANDIDATES, GenerationOrchestrator
from services.codegen_service.src.outcomes import (
    Classification,
    ExhaustedFailure,
    FatalFailure,
    GenerationRequest,
    GenerationSuccess,
)

CANDIDATES = ("m0", "m1", "m2", "m3")


@pytest.fixture
def run(scripted):
    def _run(outcomes, candidates=CANDIDATES, **kwargs):
        provider = scripted(outcomes)
        orchestrator = GenerationOrchestrator(provider=provider, **kwargs)
        outcome = orchestrator.orchestrate(GenerationRequest(prompt="make a door", candidates=candidates))
        return outcome, provider
    return _run

@pytest.mark.parametrize("k", [0, 1, 2, 3])
def test_k_transient_failures_then_success(run, overloaded, k):
    outcomes = [overloaded() for _ in range(k)] + ["```lua\nprint('ok')\n```"]
    outcome, provider = run(outcomes)

    assert isinstance(outcome, GenerationSuccess)
    assert outcome.model_used == CANDIDATES[k]
    assert outcome.extracted_code == "print('ok')"
    assert outcome.attempts == k + 1
    assert [model for model, _ in provider.calls] == list(CANDIDATES[: k + 1])

def test_all_transient_exhausts_after_exactly_n_calls(run, overloaded):
    outcomes = [overloaded(429), overloaded(503), overloaded(429), overloaded(503)]
    outcome, provider = run(outcomes)

    assert isinstance(outcome, ExhaustedFailure)
    assert len(provider.calls) == len(CANDIDATES)
    assert outcome.attempts == len(CANDIDATES)
    # last attempt's cause is the one reported
    assert outcome.last_cause.status == 503
    assert outcome.last_cause.model == "m3"
    assert outcome.last_cause.classification is Classification.TRANSIENT

@pytest.mark.parametrize("i", [0, 1, 3])
def test_fatal_failure_stops_at_its_position(run, overloaded, i):
    outcomes = [overloaded() for _ in range(i)] + [ProviderError("[400] API key not valid", status=400)]
    # anything left in the script must never be consumed
    outcomes += ["```lua\nunused\n```"] * (len(CANDIDATES) - i - 1)
    outcome, provider = run(outcomes)

    assert isinstance(outcome, FatalFailure)
    assert len(provider.calls) == i + 1
    assert outcome.model_used == CANDIDATES[i]
    assert outcome.cause.classification is Classification.FATAL
    assert outcome.cause.message == "[400] API key not valid"

def test_empty_candidate_list_makes_no_calls(run):
    outcome, provider = run([], candidates=())

    assert isinstance(outcome, ExhaustedFailure)
    assert outcome.attempts == 0
    assert outcome.last_cause.message == NO_CANDIDATES
    assert provider.calls == []

def test_same_prompt_is_sent_to_every_candidate(run, overloaded):
    outcome, provider = run([overloaded(), "plain answer"], prompt_template="Code only: {prompt}")

    assert isinstance(outcome, GenerationSuccess)
    assert outcome.extracted_code == "plain answer"
    assert [prompt for _, prompt in provider.calls] == ["Code only: make a door"] * 2

def test_prompt_unwrapped_without_template(run):
    _, provider = run(["x"])
    assert provider.calls == [("m0", "make a door")]

def test_duplicate_candidates_are_each_tried(run, overloaded):
    outcome, provider = run([overloaded(), "x"], candidates=("dup", "dup"))
    assert isinstance(outcome, GenerationSuccess)
    assert [model for model, _ in provider.calls] == ["dup", "dup"]

def test_language_is_passed_to_extractor(run):
    outcome, _ = run(["```js\nalert(1)\n```"], language="js")
    assert outcome.extracted_code == "alert(1)"

def test_request_candidates_are_frozen():
    request = GenerationRequest(prompt="p", candidates=["a", "b"])
    assert request.candidates == ("a", "b")

def test_unexpected_exceptions_propagate(scripted):
    provider = scripted([KeyError("bug")])
    orchestrator = GenerationOrchestrator(provider=provider)
    with pytest.raises(KeyError):
        orchestrator.orchestrate(GenerationRequest(prompt="p", candidates=("m0", "m1")))
    assert len(provider.calls) == 1
