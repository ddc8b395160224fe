"""
OpenAI chat completion client for objection suggestions.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI

from .prompts import OBJECTION_SYSTEM_PROMPT, get_objection_prompt

logger = logging.getLogger(__name__)


class EmptySuggestionError(RuntimeError):
    """The completion came back without any text."""


class ObjectionSuggester:
    """
    Generates a suggested reply to a sales objection using GPT.

    The underlying AsyncOpenAI client is created once and shared by every
    connection. No timeout or retry is applied on top of the SDK defaults.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-3.5-turbo",
        client: Optional[AsyncOpenAI] = None,
    ):
        """
        Initialize the suggester.

        Args:
            api_key: OpenAI API key. If None, uses OPENAI_API_KEY env var.
            model: Chat model to use
            client: Pre-built client (mainly for tests)
        """
        if client is None:
            client = AsyncOpenAI(api_key=api_key) if api_key else AsyncOpenAI()
        self.client = client
        self.model = model

    async def suggest(self, message: str) -> str:
        """
        Ask the model how to handle an objection.

        Raises:
            EmptySuggestionError: the model returned no content
            openai.OpenAIError: the API call failed
        """
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": OBJECTION_SYSTEM_PROMPT},
                {"role": "user", "content": get_objection_prompt(message)},
            ],
        )

        suggestion = response.choices[0].message.content if response.choices else None
        if not suggestion:
            raise EmptySuggestionError(f"Model {self.model} returned an empty suggestion")
        return suggestion
