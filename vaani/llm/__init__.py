"""
VAANI LLM Runtime

Brain abstraction: hosted model with an offline heuristic fallback.
"""

from .base import Brain, RemoteBrainError, DEFAULT_MAX_OUTPUT_TOKENS
from .remote_llm import RemoteBrain, SYSTEM_PERSONA
from .local_llm import (
    LocalHeuristicBrain,
    extract_user_text,
    OFFLINE_WEATHER_REPLY,
    IDENTITY_REPLY,
    SHORT_PROMPT_REPLY,
    GENERIC_REPLY,
)
from .hybrid_llm import FallbackBrain, build_brain

__all__ = [
    'Brain',
    'RemoteBrainError',
    'DEFAULT_MAX_OUTPUT_TOKENS',
    'RemoteBrain',
    'SYSTEM_PERSONA',
    'LocalHeuristicBrain',
    'extract_user_text',
    'OFFLINE_WEATHER_REPLY',
    'IDENTITY_REPLY',
    'SHORT_PROMPT_REPLY',
    'GENERIC_REPLY',
    'FallbackBrain',
    'build_brain',
]
