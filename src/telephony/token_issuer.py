"""
Access token issuing for the browser calling client.

Builds a Twilio Access Token carrying a Voice grant so the Voice JS SDK
can place calls through the TwiML app and receive incoming calls.
"""

import logging
from typing import Optional

from twilio.jwt.access_token import AccessToken
from twilio.jwt.access_token.grants import VoiceGrant

logger = logging.getLogger(__name__)


DEFAULT_IDENTITY = "caller"
DEFAULT_TTL_SECONDS = 3600


class TokenIssuer:
    """
    Signs short-lived Voice access tokens.

    Every token is minted for the same client identity unless the caller
    passes one explicitly. Token construction is local (HMAC signing),
    so there is nothing to persist and no network call.
    """

    def __init__(
        self,
        account_sid: str,
        api_key: str,
        api_secret: str,
        app_sid: str,
        identity: str = DEFAULT_IDENTITY,
        ttl: int = DEFAULT_TTL_SECONDS,
    ):
        """
        Args:
            account_sid: Twilio Account SID (token subject)
            api_key: API Key SID (token issuer)
            api_secret: API Key secret used as the signing key
            app_sid: TwiML App SID for outgoing calls
            identity: Default client identity
            ttl: Token lifetime in seconds
        """
        self.account_sid = account_sid
        self.api_key = api_key
        self.api_secret = api_secret
        self.app_sid = app_sid
        self.identity = identity
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings) -> "TokenIssuer":
        return cls(
            account_sid=settings.twilio_account_sid,
            api_key=settings.twilio_api_key,
            api_secret=settings.twilio_api_secret,
            app_sid=settings.twilio_app_sid,
            identity=settings.token_identity,
            ttl=settings.token_ttl,
        )

    def issue_token(self, identity: Optional[str] = None) -> dict[str, str]:
        """
        Build and sign an access token.

        Args:
            identity: Client identity; defaults to the configured one

        Returns:
            {"token": <signed JWT>}
        """
        identity = identity or self.identity

        voice_grant = VoiceGrant(
            outgoing_application_sid=self.app_sid,
            incoming_allow=True,
        )

        token = AccessToken(
            self.account_sid,
            self.api_key,
            self.api_secret,
            identity=identity,
            ttl=self.ttl,
        )
        token.add_grant(voice_grant)

        logger.debug(f"Issued voice token for identity '{identity}' (ttl={self.ttl}s)")
        return {"token": token.to_jwt()}
