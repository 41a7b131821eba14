"""
Answer generation client.

Sends a system + human message pair to a chat model and reports the text,
model name and token usage.

Dependencies: langchain_core, langchain_google_genai
System role: Generation provider adapter for answer assembly
"""

import logging
from typing import Any, Callable

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel

from knowledgebase.core.exceptions import GenerationProviderError

logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    """Text and accounting data of one generation call."""

    text: str
    model: str
    tokens_used: int = 0


class GenerationClient:
    """Chat model access with one cached model instance per model name."""

    def __init__(
        self,
        default_model: str,
        temperature: float = 0.7,
        max_output_tokens: int = 500,
        model_factory: Callable[[str], BaseChatModel] | None = None,
    ) -> None:
        """
        Initialize generation client.

        Args:
            default_model: Model used when a request does not name one
            temperature: Sampling temperature
            max_output_tokens: Answer length cap
            model_factory: Callable(model_name) -> chat model, for tests
        """
        self.default_model = default_model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._model_factory = model_factory or self._google_model
        self._models: dict[str, BaseChatModel] = {}

    def _google_model(self, model_name: str) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            model=model_name,
            temperature=self._temperature,
            max_output_tokens=self._max_output_tokens,
        )

    def _model(self, model_name: str) -> BaseChatModel:
        if model_name not in self._models:
            self._models[model_name] = self._model_factory(model_name)
        return self._models[model_name]

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str | None = None,
    ) -> GenerationResult:
        """
        Run one generation call.

        Args:
            system_prompt: Grounding instructions
            user_prompt: Context block and question
            model: Model override

        Returns:
            GenerationResult: Answer text, model and total tokens

        Raises:
            GenerationProviderError: Provider call failed
        """
        model_name = model or self.default_model
        try:
            response = await self._model(model_name).ainvoke(
                [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
            )
        except Exception as e:
            logger.error(f"{__name__}:generate - {type(e).__name__}: {e}")
            raise GenerationProviderError(
                f"Generation provider call failed: {e}",
                details={"model": model_name},
            ) from e

        usage = getattr(response, "usage_metadata", None) or {}
        return GenerationResult(
            text=_message_text(response.content),
            model=model_name,
            tokens_used=int(usage.get("total_tokens", 0) or 0),
        )


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    parts = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts)
