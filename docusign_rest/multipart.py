"""
Multipart Upload Encoding

Builds the multipart/form-data bodies used for document uploads:

    --<boundary>
    Content-Type: application/json
    Content-Disposition: form-data; name="post_body"

    {...envelope json...}
    --<boundary>
    Content-Disposition: file; name="file1"; filename="contract.pdf"; documentid=1
    Content-Type: application/pdf
    Content-Transfer-Encoding: binary

    <bytes>
    --<boundary>--

The provider requires the JSON part to carry its own Content-Type, which
generic form encoders leave out, so parts are assembled here. Bodies are
fully buffered.
"""

import json
import logging
import re
import uuid
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .types import Document

logger = logging.getLogger(__name__)

CRLF = b'\r\n'
POST_BODY_PART = 'post_body'

_BOUNDARY_RE = re.compile(r'boundary="?([^";]+)"?', re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r'[\r\n]+')


def quote_filename(filename: str) -> str:
    """
    Quoted-string form of a filename for a Content-Disposition parameter.

    Backslashes and double quotes are escaped; line breaks become spaces
    so a name cannot end the header early.
    """
    filename = _LINE_BREAK_RE.sub(' ', filename)
    return '"' + filename.replace('\\', '\\\\').replace('"', '\\"') + '"'


def file_disposition(filename: str, document_id: Any, name: Optional[str] = None) -> str:
    """Content-Disposition value for an uploaded document."""
    field = f' name="{name}";' if name else ''
    return f'file;{field} filename={quote_filename(filename)}; documentid={document_id}'


class MultipartEncoder:
    """
    Accumulates parts and renders a multipart/form-data body.

    Usage:
        encoder = MultipartEncoder()
        encoder.add_json('post_body', payload)
        encoder.add_file('file1', Document(path='contract.pdf'), 1)
        body = encoder.encode()
        headers = {'Content-Type': encoder.content_type}
    """

    def __init__(self, boundary: Optional[str] = None):
        self.boundary = boundary or uuid.uuid4().hex
        self._parts: List[bytes] = []

    @property
    def content_type(self) -> str:
        return f'multipart/form-data; boundary={self.boundary}'

    def add_json(self, name: str, payload: Any) -> 'MultipartEncoder':
        """Add a JSON part; dicts/lists are serialized, str/bytes sent as-is."""
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload)
        if isinstance(payload, str):
            payload = payload.encode('utf-8')

        self._append([
            'Content-Type: application/json',
            f'Content-Disposition: form-data; name="{name}"',
        ], payload)
        return self

    def add_file(self, name: str, document: Any, document_id: int) -> 'MultipartEncoder':
        """Add a binary file part tagged with its document id."""
        document = Document.from_dict(document)
        self._append([
            f'Content-Disposition: {file_disposition(document.filename, document_id, name)}',
            f'Content-Type: {document.content_type}',
            'Content-Transfer-Encoding: binary',
        ], document.read())
        return self

    def _append(self, headers: List[str], payload: bytes):
        head = f'--{self.boundary}\r\n' + ''.join(f'{h}\r\n' for h in headers) + '\r\n'
        self._parts.append(head.encode('utf-8') + payload + CRLF)

    def encode(self) -> bytes:
        """Render the complete body including the closing delimiter."""
        return b''.join(self._parts) + f'--{self.boundary}--\r\n'.encode('utf-8')


def encode_upload(
    post_body: Any,
    files: Sequence[Any],
    boundary: Optional[str] = None
) -> Tuple[bytes, str]:
    """
    Encode an envelope/template upload.

    Files become parts file1..fileN with documentid 1..N in input order.

    Returns:
        (body bytes, Content-Type header value)
    """
    encoder = MultipartEncoder(boundary)
    encoder.add_json(POST_BODY_PART, post_body)
    for index, document in enumerate(files):
        encoder.add_file(f'file{index + 1}', document, index + 1)

    body = encoder.encode()
    logger.debug(f"Encoded multipart upload with {len(files)} file(s), {len(body)} bytes")
    return body, encoder.content_type


def boundary_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """Extract the boundary parameter, or None for non-multipart types."""
    if not content_type or not content_type.lower().startswith('multipart/'):
        return None
    match = _BOUNDARY_RE.search(content_type)
    return match.group(1) if match else None


def iter_parts(body: bytes, boundary: str) -> Iterator[Tuple[Dict[str, str], bytes]]:
    """
    Split a multipart body back into (headers, payload) pairs.

    Header names keep their original capitalization.
    """
    delimiter = b'--' + boundary.encode('utf-8')

    for chunk in body.split(delimiter)[1:]:
        if chunk.startswith(b'--'):
            break
        if chunk.startswith(CRLF):
            chunk = chunk[len(CRLF):]

        head, _, payload = chunk.partition(CRLF + CRLF)
        if payload.endswith(CRLF):
            payload = payload[:-len(CRLF)]

        headers = {}
        for line in head.decode('utf-8', errors='replace').split('\r\n'):
            if not line:
                continue
            key, _, value = line.partition(':')
            headers[key.strip()] = value.strip()

        yield headers, payload
