"""
Call Log

Renders the most recent request/response exchange as text for debugging:

    --DocuSign REQUEST--
    POST https://demo.docusign.net/restapi/v2/accounts/1/envelopes
    X-DocuSign-Authentication: {"Username":"me","Password":"[FILTERED]",...}
    Body: ...
    --DocuSign RESPONSE--
    HTTP/1.1 201 Created
    Content-Type: application/json
    Body: {...}

Passwords are redacted and binary payloads elided. Bytes that are not
valid UTF-8 are decoded lossily.
"""

import logging
import re
from typing import Any, List, Mapping, Optional

from .multipart import boundary_from_content_type, iter_parts

logger = logging.getLogger(__name__)

REQUEST_MARKER = '--DocuSign REQUEST--'
RESPONSE_MARKER = '--DocuSign RESPONSE--'
FILTERED = '[FILTERED]'
BINARY_BLOB = '[BINARY BLOB]'

_PASSWORD_PATTERNS = (
    # JSON credential blob or body
    (re.compile(r'("password"\s*:\s*)"(?:[^"\\]|\\.)*"', re.IGNORECASE), rf'\1"{FILTERED}"'),
    # XML credential blob
    (re.compile(r'(<password>).*?(</password>)', re.IGNORECASE | re.DOTALL), rf'\1{FILTERED}\2'),
    # Form-encoded body
    (re.compile(r'((?:^|&)password=)[^&]*', re.IGNORECASE), rf'\1{FILTERED}'),
)

_TEXT_TYPE_MARKERS = ('text/', 'json', 'xml', 'x-www-form-urlencoded', 'javascript')

_HTTP_VERSIONS = {9: '0.9', 10: '1.0', 11: '1.1', 20: '2'}


def redact(text: str) -> str:
    """Replace every password value with [FILTERED]."""
    for pattern, replacement in _PASSWORD_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _decode(data: Any) -> str:
    if data is None:
        return ''
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode('utf-8', errors='replace')
    return str(data)


def _is_textual(content_type: Optional[str]) -> bool:
    if not content_type:
        return True
    content_type = content_type.lower()
    return any(marker in content_type for marker in _TEXT_TYPE_MARKERS)


def render_body(body: Any, content_type: Optional[str]) -> str:
    """Body text with binary content elided and passwords redacted."""
    if not body:
        return ''

    boundary = boundary_from_content_type(content_type)
    if boundary and isinstance(body, (bytes, bytearray)):
        text = _render_multipart(bytes(body), boundary)
    elif not _is_textual(content_type):
        return BINARY_BLOB
    else:
        text = _decode(body)

    return redact(text)


def _render_multipart(body: bytes, boundary: str) -> str:
    lines = []
    for headers, payload in iter_parts(body, boundary):
        lines.append(f'--{boundary}')
        lines.extend(f'{key}: {value}' for key, value in headers.items())
        lines.append('')
        if headers.get('Content-Transfer-Encoding', '').lower() == 'binary':
            lines.append(BINARY_BLOB)
        else:
            lines.append(_decode(payload))
    lines.append(f'--{boundary}--')
    return '\r\n'.join(lines)


def _header_lines(headers: Mapping[str, Any]) -> List[str]:
    return [f'{key}: {redact(_decode(value))}' for key, value in (headers or {}).items()]


def _http_version(response) -> str:
    version = getattr(getattr(response, 'raw', None), 'version', None)
    return _HTTP_VERSIONS.get(version, '1.1')


class CallLog:
    """Keeps the rendered text of the most recent exchange only."""

    def __init__(self):
        self.last: Optional[List[str]] = None

    def record(self, response) -> List[str]:
        """
        Render a completed exchange from a requests.Response.

        Returns:
            The rendered lines, also stored as .last
        """
        request = response.request
        request_type = request.headers.get('Content-Type')
        response_type = response.headers.get('Content-Type')

        lines = [REQUEST_MARKER, f'{request.method} {request.url}']
        lines.extend(_header_lines(request.headers))
        lines.append(f'Body: {render_body(request.body, request_type)}')

        lines.append(RESPONSE_MARKER)
        lines.append(f'HTTP/{_http_version(response)} {response.status_code} {response.reason or ""}'.rstrip())
        lines.extend(_header_lines(response.headers))
        lines.append(f'Body: {render_body(response.content, response_type)}')

        self.last = lines
        logger.debug('\n'.join(lines))
        return lines

    def clear(self):
        self.last = None

    def __str__(self) -> str:
        return '\n'.join(self.last or [])
