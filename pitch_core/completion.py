"""Completion API adapter built on ``dspy.LM``."""

from typing import Any, Optional

import dspy

from .config import CompletionConfig
from .exceptions import EmptyCompletionError, UpstreamError
from .logging_config import get_logger
from .models import SamplingParams

logger = get_logger("completion")


class CompletionClient:
    """
    Send a role-tagged message list to the language model and return its text.

    The underlying ``dspy.LM`` is created lazily on first use. A missing API
    key is reported as a configuration error before any request is made.
    Nothing is retried.
    """

    def __init__(self, config: CompletionConfig, lm: Optional[Any] = None):
        self.config = config
        self._lm = lm

    def _get_lm(self) -> Any:
        if self._lm is None:
            self._lm = dspy.LM(
                model=self.config.model,
                api_key=self.config.api_key,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                cache=False,
                num_retries=0,
            )
            logger.info("Language model client configured: %s", self.config.model)
        return self._lm

    @staticmethod
    def _first_text(outputs: Any) -> Optional[str]:
        if not outputs:
            return None
        first = outputs[0] if isinstance(outputs, list) else outputs
        if isinstance(first, dict):
            first = first.get("text")
        return first if isinstance(first, str) else None

    async def invoke(self, messages: list[dict[str, str]], sampling: Optional[SamplingParams] = None) -> str:
        """
        Request one completion.

        Args:
            messages: Role-tagged messages in request order
            sampling: Sampling parameters; defaults come from the config

        Returns:
            The completion text

        Raises:
            MissingCredentialsError: If no API key is configured (no call is made)
            EmptyCompletionError: If the model returned no text
            UpstreamError: If the provider call failed for any other reason
        """
        sampling = sampling or SamplingParams(
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )
        self.config.validate_credentials()
        lm = self._get_lm()

        kwargs: dict[str, Any] = {
            "temperature": sampling.temperature,
            "max_tokens": sampling.max_tokens,
        }
        if sampling.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            outputs = await lm.acall(messages=messages, **kwargs)
        except Exception as e:
            logger.error("Completion request failed: %s", e)
            raise UpstreamError(str(e) or type(e).__name__) from e

        text = self._first_text(outputs)
        if not text or not text.strip():
            raise EmptyCompletionError()
        return text
