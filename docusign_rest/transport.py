"""
HTTP Transport

Issues one synchronous HTTPS request per call with requests, no session
and no retries. Every exchange is rendered into the call log.

Remote error statuses are not raised; callers receive the provider's
error body. Connection, timeout and TLS failures propagate unchanged.
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Union

import certifi
import requests

from .authentication import authentication_headers
from .call_log import CallLog
from .configuration import Configuration
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'


class Transport:
    """
    Sends requests for one client configuration.

    Args:
        config: Connection and authentication settings
        call_log: Where the last exchange is recorded (a new one if omitted)

    Raises:
        ConfigurationError: If a configured CA bundle does not exist
    """

    def __init__(self, config: Configuration, call_log: Optional[CallLog] = None):
        self.config = config
        self.call_log = call_log if call_log is not None else CallLog()
        self._verify = self._resolve_verify()

    def build_uri(self, path: str) -> str:
        """endpoint + '/' + api_version + path"""
        return f"{self.config.endpoint.rstrip('/')}/{self.config.api_version}{path}"

    def headers(
        self,
        user_headers: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None
    ) -> Dict[str, str]:
        """Authentication header, then defaults, then caller overrides, which win."""
        headers = authentication_headers(self.config)
        headers['Accept'] = JSON_CONTENT_TYPE
        headers['User-Agent'] = self.config.user_agent
        if content_type:
            headers['Content-Type'] = content_type
        if user_headers:
            headers.update(user_headers)
        return headers

    def verify(self) -> Union[str, bool]:
        """The requests verify= argument: a CA bundle path or False."""
        return self._verify

    def _resolve_verify(self) -> Union[str, bool]:
        if self.config.endpoint.lower().startswith('http://'):
            return False

        if not self.config.verify_ssl:
            logger.warning(f"TLS certificate verification disabled for {self.config.endpoint}")
            return False

        if self.config.ca_file:
            if not os.path.isfile(self.config.ca_file):
                raise ConfigurationError(f"CA bundle not found: {self.config.ca_file}")
            return self.config.ca_file

        return certifi.where()

    def request(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        data: Any = None,
        content_type: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> requests.Response:
        """
        Send one request and record it in the call log.

        Args:
            method: HTTP method name
            path: Path relative to endpoint/api_version, starting with '/'
            json_body: Serialized as the JSON request body
            data: Raw body (bytes/str) or a dict to form-encode
            content_type: Content-Type for a raw body
            params: Query string parameters
            headers: Caller header overrides

        Returns:
            The requests.Response, whatever its status
        """
        method = method.upper()
        url = self.build_uri(path)

        if json_body is not None:
            data = json.dumps(json_body)
            content_type = content_type or JSON_CONTENT_TYPE

        logger.debug(f"DocuSign {method} {url}")

        try:
            response = requests.request(
                method,
                url,
                headers=self.headers(headers, content_type),
                data=data,
                params=params,
                timeout=self.config.timeout,
                verify=self._verify
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"DocuSign {method} {url} failed: {e}")
            raise

        self.call_log.record(response)
        return response

    def request_json(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """
        Send a request and parse the JSON response.

        Returns {} for an empty body. A body that is not JSON raises the
        decode error.
        """
        response = self.request(method, path, **kwargs)
        if not response.content:
            return {}
        return response.json()

    def request_bytes(self, method: str, path: str, **kwargs) -> bytes:
        """Send a request and return the raw response body."""
        return self.request(method, path, **kwargs).content
