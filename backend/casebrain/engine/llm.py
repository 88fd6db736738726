import json
import logging
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError

from ..config import settings
from .errors import UpstreamTransportError

logger = logging.getLogger(__name__)


class ChatSession(Protocol):
    async def send_message(self, message: str) -> str: ...


class ModelClient(Protocol):
    """What the workflows need from the generative model service."""

    async def generate_structured(
        self, prompt: str, schema: dict, reasoning: bool = True
    ) -> str: ...

    async def analyze_image(
        self, base64_image: str, mime_type: str, prompt: str
    ) -> str: ...

    def create_chat(self, system_instruction: str) -> ChatSession: ...


class OpenAIChatSession:
    """A running conversation; keeps its own message history."""

    def __init__(
        self, client: AsyncOpenAI, model: str, system_instruction: str
    ) -> None:
        self._client = client
        self._model = model
        self.messages: list[dict] = [
            {"role": "system", "content": system_instruction}
        ]

    async def send_message(self, message: str) -> str:
        # an empty message asks the model to open the conversation
        pending = list(self.messages)
        if message:
            pending.append({"role": "user", "content": message})
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=pending,
                temperature=0.3,
                max_tokens=2048,
            )
        except OpenAIError as exc:
            raise UpstreamTransportError(str(exc)) from exc

        reply = response.choices[0].message.content or ""
        pending.append({"role": "assistant", "content": reply})
        self.messages = pending
        return reply


class OpenAIModel:
    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=settings.openai_api_key)
        return self._client

    async def generate_structured(
        self, prompt: str, schema: dict, reasoning: bool = True
    ) -> str:
        """Single LLM call that asks for JSON matching ``schema``.

        The raw text is returned unparsed; callers validate it.
        """
        system_prompt = (
            "Respond only with JSON that matches this JSON schema. "
            "Do not include any text outside the JSON.\n"
            f"{json.dumps(schema)}"
        )
        model = settings.openai_reasoning_model if reasoning else settings.openai_model
        return await self._complete(
            model,
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            max_tokens=4096,
        )

    async def analyze_image(
        self, base64_image: str, mime_type: str, prompt: str
    ) -> str:
        return await self._complete(
            settings.openai_model,
            [
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:{mime_type};base64,{base64_image}"
                            },
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
        )

    def create_chat(self, system_instruction: str) -> OpenAIChatSession:
        return OpenAIChatSession(
            self._get_client(), settings.openai_model, system_instruction
        )

    async def _complete(
        self, model: str, messages: list[dict], max_tokens: int = 2048
    ) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=0.3,
                max_tokens=max_tokens,
            )
        except OpenAIError as exc:
            logger.error("Model call to %s failed: %s", model, exc)
            raise UpstreamTransportError(str(exc)) from exc
        return response.choices[0].message.content or ""
