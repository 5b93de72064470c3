from typing import Optional, Protocol

from openai import APIConnectionError, APIError, APIStatusError, APITimeoutError, OpenAI

from .exceptions import ProviderError
from .logging import jlog

class GenerationProvider(Protocol):
    name: str

    def generate(self, model: str, prompt: str) -> str:
        """Return the raw model text, or raise ProviderError."""
        ...

class GeminiProvider:
    """
    Gemini through its OpenAI-compatible endpoint.

    SDK-side retries are switched off: a 429/503 has to reach the orchestrator
    on the first try so it can move to the next model instead of hammering the
    same one.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout_s: float,
        client: Optional[OpenAI] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout_s = timeout_s
        self._client = client

    def _make_client(self) -> OpenAI:
        if self._client is None:
            if not self._api_key:
                raise ProviderError("Missing GEMINI_API_KEY/GOOGLE_API_KEY for codegen service")
            self._client = OpenAI(
                base_url=self._base_url,
                api_key=self._api_key,
                max_retries=0,
                timeout=self._timeout_s,
            )
        return self._client

    def generate(self, model: str, prompt: str) -> str:
        client = self._make_client()

        try:
            completion = client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                timeout=self._timeout_s,
            )  # type: ignore
        except APIStatusError as e:
            raise ProviderError(f"[{e.status_code}] {e.message}", status=e.status_code) from e
        except (APITimeoutError, APIConnectionError) as e:
            raise ProviderError(f"LLM timeout/conn: {e}") from e
        except APIError as e:
            raise ProviderError(f"LLM API error: {e}") from e
        except Exception as e:
            raise ProviderError(f"LLM unknown error: {e}") from e

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            finish = getattr(choices[0], "finish_reason", None) if choices else None
            raise ProviderError(f"Empty response from {model} (finish_reason={finish})")

        usage = getattr(completion, "usage", None)
        jlog(
            event="provider_ok",
            provider=self.name,
            model_name=model,
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            completion_tokens=getattr(usage, "completion_tokens", None),
            total_tokens=getattr(usage, "total_tokens", None),
        )
        return content
