"""Streaming completions from the Anthropic API."""

import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable

from anthropic import AsyncAnthropic

from edtech.config import get_settings
from edtech.schemas.chat import Message
from edtech.services.errors import SetupRequiredError

logger = logging.getLogger(__name__)


class CompletionStream:
    """
    Single-attempt streaming client for the completion service.

    No retries: a failure while iterating propagates to the caller, which
    turns it into one terminal error message.
    """

    def __init__(
        self,
        model: str | None = None,
        max_tokens: int | None = None,
        thinking_budget: int | None = None,
        client_factory: Callable[..., AsyncAnthropic] = AsyncAnthropic,
    ):
        settings = get_settings()
        self.model = model or settings.llm_model
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.thinking_budget = thinking_budget or settings.llm_thinking_budget
        self.client_factory = client_factory

    async def stream(
        self,
        api_key: str | None,
        user_text: str,
        system_instruction: str,
        history: list[dict],
        *,
        thinking: bool = False,
    ) -> AsyncIterator[str]:
        """
        Stream a response as text deltas.

        Args:
            api_key: Completion service credential
            user_text: Current user turn
            system_instruction: Fully assembled instruction
            history: Prior turns (list of dicts with 'role' and 'content'),
                not including the current one
            thinking: Enable the extended reasoning budget

        Yields:
            Text chunks in arrival order. The sequence is finite and cannot
            be restarted.

        Raises:
            SetupRequiredError: If no API key is configured (before any network call)
        """
        if not api_key:
            raise SetupRequiredError()

        client = self.client_factory(api_key=api_key)
        request = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system_instruction,
            "messages": history + [{"role": "user", "content": user_text}],
        }
        if thinking:
            request["thinking"] = {"type": "enabled", "budget_tokens": self.thinking_budget}

        async with client.messages.stream(**request) as stream:
            async for text in stream.text_stream:
                yield text


async def apply_chunks(message: Message, chunks: AsyncIterable[str]) -> AsyncIterator[Message]:
    """
    Apply streamed chunks to a placeholder message.

    Each update sets the message text to everything received so far and
    yields a full snapshot, so replaying the same chunk sequence always
    ends with the same text. Chunks are concatenated in arrival order.
    """
    text = ""
    async for chunk in chunks:
        text += chunk
        message.text = text
        yield message.model_copy(deep=True)
