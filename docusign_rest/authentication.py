"""
Authentication Headers

Builds the single authentication header sent with every request.
A bearer token always wins; otherwise the legacy credential header
carries username, password and integrator key.
"""

import json
import logging
from typing import Dict
from xml.sax.saxutils import escape

from .configuration import AuthMode, Configuration
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CREDENTIALS_HEADER = 'X-DocuSign-Authentication'


def authentication_headers(config: Configuration) -> Dict[str, str]:
    """
    Return the authentication header for a configuration.

    Returns an empty dict when nothing is configured; the provider is
    left to reject the request.
    """
    mode = config.auth_mode

    if mode == AuthMode.TOKEN:
        if config.username or config.password:
            logger.debug("Access token configured alongside credentials; using token")
        return {'Authorization': f"Bearer {config.access_token}"}

    if mode == AuthMode.CREDENTIALS:
        return {CREDENTIALS_HEADER: credential_blob(config)}

    return {}


def credential_blob(config: Configuration) -> str:
    """Serialize the legacy credentials in the configured format."""
    fmt = (config.credential_format or 'json').lower()

    if fmt == 'json':
        return json.dumps({
            'Username': config.username or '',
            'Password': config.password or '',
            'IntegratorKey': config.integrator_key or '',
        }, separators=(',', ':'))

    if fmt == 'xml':
        return (
            "<DocuSignCredentials>"
            f"<Username>{escape(config.username or '')}</Username>"
            f"<Password>{escape(config.password or '')}</Password>"
            f"<IntegratorKey>{escape(config.integrator_key or '')}</IntegratorKey>"
            "</DocuSignCredentials>"
        )

    raise ConfigurationError(f"Unknown credential format: {config.credential_format}")
