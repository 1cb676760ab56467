"""
VAANI Hybrid Brain - Remote Model + Local Heuristic Fallback

Design:
- FallbackBrain exposes the same .complete() interface as any Brain,
  so the assistant never knows which one answered.
- The remote brain is attempted first when a credential is configured.
- RemoteBrainError from the remote side triggers a fallback to the local
  heuristic brain, logged as a warning.
- Without a credential the remote side is skipped entirely (no network call).
"""

import logging
from typing import Optional

from vaani.config import Settings

from .base import Brain, RemoteBrainError, DEFAULT_MAX_OUTPUT_TOKENS
from .local_llm import LocalHeuristicBrain
from .remote_llm import RemoteBrain

logger = logging.getLogger(__name__)


class FallbackBrain(Brain):
    """
    Drop-in Brain that tries `primary` and answers from `fallback` on failure.

    Usage:
        brain = FallbackBrain(RemoteBrain(...), LocalHeuristicBrain())
        reply = brain.complete(prompt)
    """

    def __init__(self, primary: Optional[Brain], fallback: Brain):
        """
        Args:
            primary: Preferred brain, or None to always use the fallback
            fallback: Brain that must not raise
        """
        self.primary = primary
        self.fallback = fallback

    def complete(self, prompt: str, max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS) -> str:
        if self.primary is not None:
            try:
                return self.primary.complete(prompt, max_output_tokens=max_output_tokens)
            except RemoteBrainError as e:
                logger.warning(f"FallbackBrain: remote brain failed ({e}) - using local fallback")

        return self.fallback.complete(prompt, max_output_tokens=max_output_tokens)


def build_brain(settings: Settings) -> FallbackBrain:
    """
    Assemble the brain for this process.

    Returns:
        FallbackBrain with a RemoteBrain primary when GROQ_API_KEY is set,
        otherwise one that answers locally only
    """
    local = LocalHeuristicBrain()

    if not settings.has_brain_credential:
        logger.warning(
            "Brain: GROQ_API_KEY not set - all replies come from the local fallback. "
            "Set GROQ_API_KEY to enable the remote model."
        )
        return FallbackBrain(None, local)

    remote = RemoteBrain(
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        model=settings.groq_model,
        timeout=settings.brain_timeout,
    )
    logger.info("Brain initialized - remote model primary, local heuristic fallback")
    return FallbackBrain(remote, local)
