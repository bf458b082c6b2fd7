"""
Client for the text generation service.

Wraps the Mistral chat API: one system prompt plus one user prompt in, plain
text out. Calls go through the shared rate limiter and replies are cached on
disk, keyed by model and prompts.
"""

import logging
import os
from typing import Optional

from mistralai import Mistral

from latex_edit_engine.core.surgical_editor.cache_manager import CompletionCache, get_cache
from latex_edit_engine.core.surgical_editor.config import MISTRAL_MODEL, MISTRAL_TEMPERATURE
from latex_edit_engine.core.surgical_editor.prompts import EDITING_SYSTEM_PROMPT
from latex_edit_engine.core.surgical_editor.rate_limiter import SharedRateLimiter, rate_limiter

logger = logging.getLogger(__name__)

COMPONENT_NAME = "completion_client"


class CompletionClient:
    """Fetches completions for editing prompts."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache: Optional[CompletionCache] = None,
        use_cache: bool = True,
        model: str = MISTRAL_MODEL,
        temperature: float = MISTRAL_TEMPERATURE,
        limiter: Optional[SharedRateLimiter] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Mistral API key (defaults to MISTRAL_API_KEY environment variable)
            cache: Cache instance (uses global if None)
            use_cache: Whether to use caching (disable when iterating on prompts)
            model: Mistral model name
            temperature: Sampling temperature
            limiter: Rate limiter (uses the shared one if None)
        """
        self.api_key = api_key or os.getenv("MISTRAL_API_KEY")
        if not self.api_key:
            raise ValueError("MISTRAL_API_KEY environment variable is required")

        self.client = Mistral(api_key=self.api_key)
        self.cache = cache or get_cache()
        self.use_cache = use_cache
        self.model = model
        self.temperature = temperature
        self.rate_limiter = limiter or rate_limiter

        logger.info("CompletionClient initialized (model=%s, caching %s)", model, "enabled" if use_cache else "disabled")

    def complete(self, prompt: str, system_prompt: str = EDITING_SYSTEM_PROMPT) -> str:
        """
        Get the generator's reply to `prompt`.

        Raises:
            RuntimeError: If the API call fails
        """
        cache_key_data = {"model": self.model, "system": system_prompt, "prompt": prompt}
        if self.use_cache:
            cached = self.cache.get(COMPONENT_NAME, cache_key_data)
            if cached is not None:
                logger.debug("Using cached completion")
                return cached

        def llm_call():
            return self.client.chat.complete(
                model=self.model,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
            )

        try:
            response = self.rate_limiter.execute_with_retry(llm_call, COMPONENT_NAME)
        except Exception as e:
            logger.error("Completion request failed: %s", e)
            raise RuntimeError(f"Generation service call failed: {e}") from e

        content = ""
        if response and response.choices:
            content = response.choices[0].message.content or ""
            if isinstance(content, list):
                # Reasoning models return typed chunks; keep the text ones
                content = "".join(getattr(chunk, "text", "") or "" for chunk in content)

        if content and self.use_cache:
            self.cache.set(COMPONENT_NAME, cache_key_data, content)
        return content
