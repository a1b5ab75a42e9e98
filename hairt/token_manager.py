"""
OAuth2 client-credentials tokens for the Airthings API.

The consumer API has exactly one scope, `read:device:current_values`. Tokens
are not tracked for expiry: a new one is requested only after a poll fails.
"""

import logging
import requests
from pydantic import BaseModel, ConfigDict, constr

from hairt.paths import TIMEOUT_SECONDS, USER_AGENT

TOKEN_URL = "https://accounts-api.airthings.com/v1/token"
TOKEN_SCOPE = "read:device:current_values"

logger = logging.getLogger(__name__)


class AirthingsError(Exception):
    """Error talking to the Airthings API"""
    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthError(AirthingsError):
    """Token endpoint failed or returned something we could not use"""


class Credentials(BaseModel):
    """Client id/secret of a registered Airthings API client."""
    model_config = ConfigDict(frozen=True)

    client_id: constr(min_length=1)
    client_secret: constr(min_length=1)

    def __repr__(self):
        return f"Credentials(client_id={self.client_id!r})"

    __str__ = __repr__


def acquire_token(credentials: Credentials):
    """
    Get an access token using the client credentials grant type.
    :param credentials: the client id and secret
    :return: the bearer token string
    :raises AuthError: on any HTTP status >= 300, transport error or malformed body.
    """
    payload = {
        'grant_type': 'client_credentials',
        'scope': TOKEN_SCOPE,
        'client_id': credentials.client_id,
        'client_secret': credentials.client_secret,
    }
    headers = {'User-Agent': USER_AGENT}
    try:
        r = requests.post(TOKEN_URL, data=payload, headers=headers, timeout=TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as e:
        logger.error("Exception while requesting token: %s", e)
        raise AuthError(f"token request failed: {e}", body=str(e)) from e

    if r.status_code >= 300:
        logger.error("Failed to receive access token. Response status code: %s, data: %s", r.status_code, r.text)
        raise AuthError(f"token endpoint returned {r.status_code}", status_code=r.status_code, body=r.text)

    try:
        token = r.json()['access_token']
    except (ValueError, KeyError, TypeError) as e:
        logger.error("Malformed token response: %s", r.text)
        raise AuthError("malformed token response", status_code=r.status_code, body=r.text) from e
    if not isinstance(token, str) or not token:
        logger.error("Malformed token response: %s", r.text)
        raise AuthError("malformed token response", status_code=r.status_code, body=r.text)

    logger.info("Access token received. HTTP response status %s", r.status_code)
    return token


class TokenSession:
    """Holds the one cached bearer token. Owned by the driver and handed to the poller."""
    def __init__(self, token=None):
        self.token = token

    def refresh(self, credentials: Credentials):
        """Replace the cached token with a new one.
        On AuthError the cached token is left as it was.
        """
        self.token = acquire_token(credentials)
        return self.token

    def __repr__(self):
        return f"TokenSession(has_token={self.token is not None})"
