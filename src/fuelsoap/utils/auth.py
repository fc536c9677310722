# fuelsoap/utils/auth.py

import logging
from typing import Any

import requests

from .config_loader import FuelSoapConfig

# Set up a logger for this module
logger: logging.Logger = logging.getLogger(__name__)


def request_token(config: FuelSoapConfig) -> str:
    """
    Exchange the configured client credentials for a SOAP header token.

    This function performs the token request by:
    1. Posting the client id and secret as JSON to the auth endpoint
    2. Checking the HTTP status of the reply
    3. Extracting the legacy token used in the SOAP oAuth header

    The legacy token is preferred because the partner API SOAP header expects
    it; if the endpoint only returns an access token, that one is used.

    Args:
        config: A validated FuelSoapConfig object containing:
            - Auth endpoint URL
            - Client id and secret
            - SSL verification and timeout settings

    Returns:
        str: The token to place in the SOAP oAuth header.

    Raises:
        requests.exceptions.HTTPError:
            When the token endpoint rejects the request (bad credentials, 5xx).
        requests.exceptions.RequestException:
            For network-level failures.
        RuntimeError:
            When the endpoint answers without any token.

    Example:
        >>> config = load_config()
        >>> token = request_token(config)
    """
    payload: dict[str, str] = {
        'clientId': config.auth.client_id,
        'clientSecret': config.auth.client_secret.get_secret_value(),
        'accessType': 'offline',
    }

    logger.debug('Requesting token from %s', config.auth.auth_url)

    token_response: requests.Response = requests.post(
        str(config.auth.auth_url),
        json=payload,
        headers={'Accept': 'application/json'},
        timeout=config.client.request_timeout,
        verify=config.client.verify_ssl,
    )

    # 401/403 here means the client id or secret is wrong
    token_response.raise_for_status()

    grant: dict[str, Any] = token_response.json()

    token: str = str(grant.get('legacyToken') or grant.get('accessToken') or '').strip()
    if not token:
        raise RuntimeError(
            'Token request appeared to succeed, but no token was found in the response.\n'
            f'Response keys: {sorted(grant)}'
        )

    logger.info(
        'Obtained SOAP token (expires in %s seconds)', grant.get('expiresIn', 'unknown')
    )
    return token
