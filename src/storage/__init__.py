"""
Storage module for call logs and objection exchanges.

Provides SQLite-based storage for:
- Call routing logs (keyed by Twilio Call SID)
- Objection / suggestion pairs
"""

from .models import CallLog, Objection
from .relay_store import RelayStore

__all__ = [
    "CallLog",
    "Objection",
    "RelayStore",
]
