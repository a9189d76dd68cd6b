import logging

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from matchmaking.config import settings
from matchmaking.utils.errors import InvalidCredential

logger = logging.getLogger(__name__)

_transport = google_requests.Request()


def verify_google_id_token(token: str, audience: str | None = None) -> tuple[str, str, bool]:
    """Verify a Google-issued ID token and return its (subject, email, email_verified).

    Tokens whose email Google has not verified are rejected.
    """
    audience = audience or settings.GOOGLE_CLIENT_ID
    try:
        claims = id_token.verify_oauth2_token(token, _transport, audience)
    except ValueError as exc:
        logger.warning("Google ID token rejected: %s", exc)
        raise InvalidCredential("Invalid Google token") from exc

    subject = claims.get("sub")
    email = claims.get("email")
    if not subject or not email:
        raise InvalidCredential("Google token is missing subject or email")
    if claims.get("email_verified") not in (True, "true"):
        logger.warning("Google ID token for subject %s carries an unverified email", subject)
        raise InvalidCredential("Google account email is not verified")
    return subject, email, True
