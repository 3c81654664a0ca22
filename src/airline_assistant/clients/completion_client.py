"""
LLM completion client (OpenAI chat completions)
"""

from typing import Any, Dict, List, Optional, Sequence

import openai
import structlog
from openai import AsyncOpenAI

from ..config import CompletionConfig, config
from ..interfaces.providers import CompletionProviderInterface
from ..types import ChatMessage, CompletionError, ConfigurationError


logger = structlog.get_logger(__name__)


EMPTY_COMPLETION_MESSAGE = "Sorry, I could not generate a response."

KEY_CHECK_PROMPT = 'Say "API key is working" if you can read this.'
KEY_CHECK_MAX_TOKENS = 20


class CompletionClient(CompletionProviderInterface):
    """Generate an assistant reply from a system prompt and the conversation"""

    def __init__(self, settings: Optional[CompletionConfig] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or config.completion
        if client is None and not self.settings.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set")

        self.client = client or AsyncOpenAI(api_key=self.settings.api_key)

    async def generate(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        chat_messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        chat_messages.extend({"role": message.role, "content": message.content} for message in messages)

        logger.info("Requesting completion", model=self.settings.model, messages=len(chat_messages))

        completion = await self._create(
            chat_messages,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )

        if not completion.choices:
            return EMPTY_COMPLETION_MESSAGE
        return completion.choices[0].message.content or EMPTY_COMPLETION_MESSAGE

    async def verify_key(self) -> str:
        """Send a tiny prompt to check that the API key works; returns the model's reply"""
        completion = await self._create(
            [{"role": "user", "content": KEY_CHECK_PROMPT}],
            max_tokens=KEY_CHECK_MAX_TOKENS,
        )
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    async def _create(self, chat_messages: List[Dict[str, Any]], **options: Any):
        try:
            return await self.client.chat.completions.create(
                model=self.settings.model,
                messages=chat_messages,
                **options,
            )
        except openai.RateLimitError as e:
            raise CompletionError(str(e), 429, "RATE_LIMITED")
        except openai.AuthenticationError as e:
            raise CompletionError(str(e), 401, "INVALID_API_KEY")
        except (openai.InternalServerError, openai.APIConnectionError) as e:
            raise CompletionError(str(e), 500, "SERVICE_UNAVAILABLE")
        except openai.APIStatusError as e:
            raise CompletionError(e.message, e.status_code, "COMPLETION_FAILED")

    async def close(self):
        await self.client.close()
