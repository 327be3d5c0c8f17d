"""
Client Configuration

Holds connection and authentication settings as an immutable value.
A process-wide default value can be replaced with configure(); every
client merges its own options over that default at construction time.

Resolution order:
    explicit client option > configured default > built-in default

Usage:
    from docusign_rest import configure, DocuSignClient

    configure(username='me@example.com', password='secret', integrator_key='KEY')
    client = DocuSignClient(account_id='123456')
"""

import logging
import os
from dataclasses import dataclass, fields, replace, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = 'https://demo.docusign.net/restapi'
DEFAULT_API_VERSION = 'v2'
DEFAULT_USER_AGENT = f'DocusignRest API Python {__version__}'
DEFAULT_METHOD = 'get'
DEFAULT_FORMAT = 'json'
DEFAULT_OPEN_TIMEOUT = 30
DEFAULT_READ_TIMEOUT = 60
DEFAULT_CREDENTIAL_FORMAT = 'json'

# Environment variable coercion
_INT_KEYS = ('open_timeout', 'read_timeout')
_BOOL_KEYS = ('verify_ssl',)


class AuthMode(Enum):
    """Which authentication header a configuration produces."""
    TOKEN = "token"
    CREDENTIALS = "credentials"
    NONE = "none"


@dataclass(frozen=True)
class Configuration:
    """
    Connection and authentication settings for one client.

    Attributes:
        endpoint: Base REST URL, without the API version segment
        api_version: Version path segment (e.g., "v2", "v2.1")
        user_agent: Sent as the User-Agent header
        method: Default HTTP method name (informational)
        access_token: OAuth bearer token; takes precedence over credentials
        username: Legacy credential login (email or user GUID)
        password: Legacy credential password
        integrator_key: Integrator/client key for the legacy credential header
        account_id: Account to act on; resolved lazily when None
        format: Response format (only "json" is parsed)
        ca_file: CA bundle used to verify the provider's certificate
        open_timeout: Connect timeout in seconds
        read_timeout: Read timeout in seconds
        verify_ssl: Verify TLS peers; disable only for local test servers
        credential_format: "json" or "xml" credential header blob
    """
    endpoint: str = DEFAULT_ENDPOINT
    api_version: str = DEFAULT_API_VERSION
    user_agent: str = DEFAULT_USER_AGENT
    method: str = DEFAULT_METHOD
    access_token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    integrator_key: Optional[str] = None
    account_id: Optional[str] = None
    format: str = DEFAULT_FORMAT
    ca_file: Optional[str] = None
    open_timeout: float = DEFAULT_OPEN_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    verify_ssl: bool = True
    credential_format: str = DEFAULT_CREDENTIAL_FORMAT

    @classmethod
    def keys(cls) -> Tuple[str, ...]:
        """Names of every recognized option."""
        return tuple(f.name for f in fields(cls))

    @property
    def timeout(self) -> Tuple[float, float]:
        """(connect, read) timeout tuple in the form requests expects."""
        return (self.open_timeout, self.read_timeout)

    @property
    def auth_mode(self) -> AuthMode:
        """Token wins over credentials when both are configured."""
        if self.access_token:
            return AuthMode.TOKEN
        if self.username or self.password or self.integrator_key:
            return AuthMode.CREDENTIALS
        return AuthMode.NONE

    def merge(self, **overrides) -> 'Configuration':
        """
        Return a copy with the given options applied.

        None values are skipped so a partial option set never erases a
        configured value. Unknown keys are ignored with a warning.
        """
        valid = set(self.keys())
        changes = {}
        for key, value in overrides.items():
            if key not in valid:
                logger.warning(f"Ignoring unknown configuration option: {key}")
                continue
            if value is None:
                continue
            changes[key] = value

        if not changes:
            return self
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """All options as a plain dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Configuration':
        """Create a Configuration from a mapping, ignoring unknown keys."""
        return cls().merge(**data)

    @classmethod
    def from_env(cls, prefix: str = 'DOCUSIGN_', dotenv_path: Optional[str] = None) -> 'Configuration':
        """
        Build a configuration from environment variables.

        Reads a .env file first (without overriding variables already set),
        then looks up PREFIX + OPTION_NAME for every option, e.g.
        DOCUSIGN_USERNAME or DOCUSIGN_API_VERSION.
        """
        load_dotenv(dotenv_path)

        data = {}
        for key in cls.keys():
            raw = os.environ.get(f"{prefix}{key.upper()}")
            if raw is None or raw == '':
                continue
            data[key] = _coerce(key, raw)

        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path) -> 'Configuration':
        """
        Build a configuration from a YAML file containing a flat mapping.

        Raises:
            ConfigurationError: If the file cannot be read or is not a mapping
        """
        path = Path(path)
        try:
            raw = yaml.safe_load(path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not load configuration from {path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a mapping")

        return cls.from_dict(raw)


def _coerce(key: str, raw: str) -> Any:
    """Convert an environment string to the option's type."""
    if key in _INT_KEYS:
        try:
            return float(raw) if '.' in raw else int(raw)
        except ValueError as e:
            raise ConfigurationError(f"Option {key} must be numeric, got {raw!r}") from e
    if key in _BOOL_KEYS:
        return raw.strip().lower() in ('1', 'true', 'yes', 'on')
    return raw


# Process-wide default, replaced (never mutated) by configure()
_defaults = Configuration()


def get_defaults() -> Configuration:
    """Return the current process-wide default configuration."""
    return _defaults


def configure(config: Optional[Configuration] = None, **options) -> Configuration:
    """
    Replace the process-wide default configuration.

    Args:
        config: A complete configuration to install as the default
        **options: Options merged over the current (or given) default

    Returns:
        The new default configuration
    """
    global _defaults
    base = config if config is not None else _defaults
    _defaults = base.merge(**options)
    return _defaults


def reset() -> Configuration:
    """Restore the built-in defaults."""
    global _defaults
    _defaults = Configuration()
    return _defaults
