"""
Google ID token verification for staff sign-in.
"""

import asyncio
import logging
from dataclasses import dataclass

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from osas.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoogleIdentity:
    google_id: str
    email: str
    first_name: str
    last_name: str


def _verify(token: str) -> dict:
    return id_token.verify_oauth2_token(
        token,
        google_requests.Request(),
        settings.google_client_id,
    )


async def verify_google_token(token: str) -> GoogleIdentity | None:
    """
    Verify a Google ID token against the configured client id.

    Returns:
        The signed-in identity, or None if the token is invalid
    """
    try:
        # google-auth is synchronous (fetches Google's certs over HTTP)
        payload = await asyncio.to_thread(_verify, token)
    except ValueError as e:
        logger.warning(f"Rejected Google ID token: {e}")
        return None

    email = payload.get("email")
    if not email or not payload.get("email_verified", False):
        logger.warning("Rejected Google ID token without a verified email")
        return None

    return GoogleIdentity(
        google_id=payload["sub"],
        email=email,
        first_name=payload.get("given_name", ""),
        last_name=payload.get("family_name", ""),
    )
