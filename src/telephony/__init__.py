"""
Telephony module for the browser calling client.

- Access tokens for the Twilio Voice JS SDK
- TwiML routing for outbound dials
"""

from .call_router import CallRouter, is_dialable
from .token_issuer import TokenIssuer

__all__ = ["CallRouter", "TokenIssuer", "is_dialable"]
