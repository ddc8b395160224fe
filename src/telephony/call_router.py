"""
Voice webhook routing.

Turns Twilio's voice webhook into a TwiML document that dials the requested
phone number from the provisioned caller ID, and records the attempt.
"""

import logging
from typing import Optional

from pydantic import ValidationError
from twilio.twiml.voice_response import VoiceResponse

from ..storage import CallLog, RelayStore

logger = logging.getLogger(__name__)


CLIENT_ADDRESS_PREFIX = "client:"
INITIATED_STATUS = "initiated"


def is_dialable(to: Optional[str]) -> bool:
    """True for a phone number, False for empty values and browser client addresses."""
    return bool(to) and not to.startswith(CLIENT_ADDRESS_PREFIX)


class CallRouter:
    """
    Builds dial instructions for outbound calls placed from the browser.

    Persistence policy: call logs are fire-and-forget. `log_call` never
    raises; a failed write is logged and routing carries on.
    """

    def __init__(self, store: RelayStore, caller_id: str):
        """
        Args:
            store: Where call logs are written
            caller_id: Provisioned Twilio number shown to the callee
        """
        self.store = store
        self.caller_id = caller_id

    def route_call(self, to: Optional[str], call_sid: Optional[str] = None) -> str:
        """
        Build the TwiML routing document for a call.

        An empty or client-style `to` is logged as invalid, but the document
        is still returned: the webhook always answers with a <Dial>.

        Returns:
            TwiML XML string
        """
        if not is_dialable(to):
            logger.error(f"Invalid 'To' number: {to!r} (call {call_sid})")

        logger.info(f"New call request: from {self.caller_id} to {to}")

        response = VoiceResponse()
        response.dial(to, caller_id=self.caller_id)
        return response.to_xml()

    def log_call(self, to: Optional[str], call_sid: Optional[str]) -> None:
        """Record the call as initiated; failures are logged, never raised."""
        try:
            record = CallLog(id=call_sid, phone_number=to, status=INITIATED_STATUS)
            self.store.insert_call_log(record)
            logger.info(f"Saved call log {call_sid} for {to}")
        except ValidationError as e:
            logger.error(f"Rejected call log for {call_sid}: {e}")
        except Exception as e:
            logger.error(f"Failed to save call log for {call_sid}: {e}")
