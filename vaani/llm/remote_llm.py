"""
VAANI Remote Brain - Groq via the OpenAI-compatible chat completions API

One synchronous request per call:
- fixed system persona
- caller's prompt as the only user turn
- low temperature (0.2)
- bounded timeout, no retries

Every failure is raised as RemoteBrainError so FallbackBrain can take over.
"""

import logging
from typing import Optional

import openai
from openai import OpenAI

from .base import Brain, RemoteBrainError, DEFAULT_MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)

SYSTEM_PERSONA = "You are Vaani, a Hindi-first, concise assistant."
TEMPERATURE = 0.2


class RemoteBrain(Brain):
    """
    Hosted language model client.

    Example:
        >>> brain = RemoteBrain(api_key="gsk_...", base_url=DEFAULT_GROQ_BASE_URL, model="llama-3.1-8b-instant")
        >>> brain.complete("User: namaste\\n\\nAnswer:")
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        timeout: float = 20.0,
        client: Optional[OpenAI] = None,
    ):
        """
        Args:
            api_key: Provider credential; None makes every call fail fast
            base_url: OpenAI-compatible endpoint
            model: Model name
            timeout: Seconds before a request is abandoned
            client: Pre-built client (tests inject a mock here)
        """
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout

        if client is not None:
            self._client = client
        elif api_key:
            self._client = OpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
            )
        else:
            self._client = None

        logger.info(f"RemoteBrain initialized (base_url={base_url}, model={model}, timeout={timeout}s)")

    def complete(self, prompt: str, max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS) -> str:
        if self._client is None:
            raise RemoteBrainError("No provider credential configured")

        logger.debug(f"RemoteBrain: sending request (prompt_len={len(prompt)}, max_tokens={max_output_tokens})")
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PERSONA},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=max_output_tokens,
                temperature=TEMPERATURE,
            )
        except openai.APIStatusError as e:
            raise RemoteBrainError(f"Provider returned HTTP {e.status_code}: {e.message}") from e
        except openai.APIError as e:
            raise RemoteBrainError(f"Provider request failed: {e}") from e

        try:
            text = response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise RemoteBrainError(f"Malformed provider response: {e}") from e

        logger.debug(f"RemoteBrain: responded ({len(text)} chars)")
        return text.strip()
