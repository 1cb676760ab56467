"""
VAANI Brain interface

A brain turns a fully built prompt into reply text. Implementations:
- RemoteBrain: hosted model (Groq, OpenAI-compatible API)
- LocalHeuristicBrain: deterministic offline replies
- FallbackBrain: remote first, local on failure
"""

from abc import ABC, abstractmethod

DEFAULT_MAX_OUTPUT_TOKENS = 220


class RemoteBrainError(Exception):
    """Raised when the hosted model cannot produce a reply (network, HTTP, credential)"""
    pass


class Brain(ABC):
    """Capability interface for prompt completion"""

    @abstractmethod
    def complete(self, prompt: str, max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS) -> str:
        """
        Complete a prompt.

        Args:
            prompt: Full prompt text
            max_output_tokens: Token budget for the reply

        Returns:
            Reply text (may be empty)
        """
        pass
