"""
Objection handling module.

Real-time sales objection assistance using:
- FastAPI WebSockets for the browser connection
- OpenAI chat completions for suggested responses
"""

from .bridge import FAILED_SUGGESTION, ConnectionState, ObjectionBridge
from .suggester import EmptySuggestionError, ObjectionSuggester

__all__ = [
    "FAILED_SUGGESTION",
    "ConnectionState",
    "ObjectionBridge",
    "EmptySuggestionError",
    "ObjectionSuggester",
]
