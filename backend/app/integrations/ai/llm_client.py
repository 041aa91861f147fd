"""LLM unified client: Claude/GPT provider abstraction."""
import logging

from app.config import Settings
from app.utils.errors import ExternalServiceError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("claude", "openai")


class LLMClient:
    """Unified LLM client supporting Claude and OpenAI providers.

    Usage:
        client = LLMClient(settings)
        text = await client.complete("Analyze this comment ...")
    """

    def __init__(self, settings: Settings, provider: str | None = None):
        self.provider = provider or settings.AI_PROVIDER
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported AI provider: {self.provider}")

        if self.provider == "claude":
            self.model = settings.ANTHROPIC_MODEL
            self.api_key = settings.ANTHROPIC_API_KEY
        else:
            self.model = settings.OPENAI_MODEL
            self.api_key = settings.OPENAI_API_KEY
        self.timeout = settings.LLM_TIMEOUT_SECONDS

    @property
    def model_name(self) -> str:
        return f"{self.provider}:{self.model}"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.3,
    ) -> str:
        """Return the model's text answer to a single-turn prompt."""
        if not self.is_configured:
            raise ExternalServiceError("llm", f"no API key configured for {self.provider}")
        if self.provider == "claude":
            return await self._complete_claude(prompt, system_prompt, max_tokens, temperature)
        return await self._complete_openai(prompt, system_prompt, max_tokens, temperature)

    # ── Claude (Anthropic) ──

    async def _complete_claude(
        self, prompt: str, system_prompt: str | None, max_tokens: int, temperature: float
    ) -> str:
        import anthropic

        client = anthropic.AsyncAnthropic(api_key=self.api_key, timeout=self.timeout)
        try:
            kwargs = {"system": system_prompt} if system_prompt else {}
            message = await client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
            return message.content[0].text
        finally:
            await client.close()

    # ── OpenAI ──

    async def _complete_openai(
        self, prompt: str, system_prompt: str | None, max_tokens: int, temperature: float
    ) -> str:
        import openai

        client = openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout)
        messages = [{"role": "user", "content": prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})
        try:
            response = await client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=messages,
            )
            return response.choices[0].message.content or ""
        finally:
            await client.close()
