"""Language model client for long-form article generation."""
import logging
from typing import AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI, APIError, APIStatusError, APITimeoutError

from shared.config import settings
from shared.errors import GenerationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are SolidWriter, an expert AI writing assistant that creates long-form content."


class GenerationClient:
    """Chat-completions client against an OpenAI-compatible endpoint.

    Every SDK failure is re-raised as ``GenerationError`` so callers only deal
    with one error type.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        self._api_key = api_key or settings.llm_api_key
        self.base_url = base_url or settings.llm_base_url
        self.model = model or settings.llm_model
        self.temperature = settings.llm_temperature if temperature is None else temperature
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.timeout = timeout or settings.llm_timeout
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-initialized SDK client."""
        if self._client is None:
            if not self._api_key:
                raise GenerationError(
                    "Language model API key not configured. Set LLM_API_KEY environment variable."
                )
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self.base_url,
                timeout=self.timeout
            )
        return self._client

    @staticmethod
    def build_system_prompt(
        voice_profile_samples: Optional[List[str]] = None,
        context: Optional[str] = None
    ) -> str:
        """System prompt carrying style samples and extra context."""
        prompt = SYSTEM_PROMPT

        samples = voice_profile_samples or []
        if samples:
            prompt += "\n\nAnalyze the following user writing samples to understand the writing style:"
            for index, sample in enumerate(samples, start=1):
                prompt += f"\n\nSample {index}:\n{sample}"
            prompt += "\n\nUse this writing style to create content that mimics the tone, voice, and writing patterns."

        if context:
            prompt += f"\n\nAdditional context: {context}"

        return prompt

    def build_messages(
        self,
        topic: str,
        outline: Optional[str] = None,
        context: Optional[str] = None,
        voice_profile_samples: Optional[List[str]] = None
    ) -> List[Dict[str, str]]:
        """Chat messages for an article request."""
        messages = [
            {"role": "system", "content": self.build_system_prompt(voice_profile_samples, context)},
            {"role": "user", "content": f"Write a comprehensive article about: {topic}"}
        ]
        if outline:
            messages.append({
                "role": "user",
                "content": f"Follow this outline structure:\n{outline}"
            })
        return messages

    async def generate(
        self,
        topic: str,
        outline: Optional[str] = None,
        context: Optional[str] = None,
        voice_profile_samples: Optional[List[str]] = None
    ) -> str:
        """Generate a full article in one blocking call."""
        messages = self.build_messages(topic, outline, context, voice_profile_samples)
        content = await self._complete(messages, self.temperature, self.max_tokens)
        if not content:
            raise GenerationError("Language model returned no content")
        return content

    async def generate_stream(
        self,
        topic: str,
        outline: Optional[str] = None,
        context: Optional[str] = None,
        voice_profile_samples: Optional[List[str]] = None
    ) -> AsyncIterator[str]:
        """Yield article fragments as the model produces them."""
        messages = self.build_messages(topic, outline, context, voice_profile_samples)

        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                stream=True
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                fragment = chunk.choices[0].delta.content
                if fragment:
                    yield fragment
        except APIError as e:
            raise self._wrap(e) from e

    async def generate_outline(self, topic: str, context: Optional[str] = None) -> str:
        """Generate a section/subsection outline for a topic."""
        messages = [
            {"role": "system", "content": self.build_system_prompt([], context)},
            {
                "role": "user",
                "content": f'Create a detailed outline for an article about "{topic}". '
                           "Include main sections and subsections."
            }
        ]
        content = await self._complete(messages, 0.5, 2000)
        if not content:
            raise GenerationError("Language model returned no outline")
        return content

    async def _complete(self, messages: List[Dict[str, str]], temperature: float, max_tokens: int) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens
            )
        except APIError as e:
            raise self._wrap(e) from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    def _wrap(self, error: APIError) -> GenerationError:
        if isinstance(error, APITimeoutError):
            return GenerationError(f"Language model request timed out after {self.timeout}s")
        if isinstance(error, APIStatusError):
            return GenerationError(
                f"Language model error {error.status_code}: {error.message}",
                status_code=error.status_code
            )
        return GenerationError(f"Language model request failed: {error}")
