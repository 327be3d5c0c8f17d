"""
DocuSign REST Client

Builds DocuSign envelope, template and recipient payloads, uploads
documents as multipart bodies, and issues authenticated requests.

Usage:
    from docusign_rest import configure, DocuSignClient

    # On app startup
    configure(username='me@example.com', password='secret', integrator_key='KEY')

    # Per workflow
    client = DocuSignClient()
    result = client.create_envelope_from_document(
        email={'subject': 'Please sign'},
        signers=[{'name': 'Ann', 'email': 'ann@example.com', 'embedded': True,
                  'sign_here_tabs': [{'anchor_string': 'sign here'}]}],
        files=[{'path': 'contract.pdf'}],
        status='sent'
    )
    view = client.get_recipient_view(
        envelope_id=result['envelopeId'], name='Ann', email='ann@example.com',
        return_url='https://app.example.com/signed'
    )
"""

from .version import __version__

from .types import (
    TabKind,
    ListItem,
    Tab,
    Signer,
    CarbonCopy,
    Document,
    EnvelopeEvent,
    EventNotification,
    EmailSettings
)

from .exceptions import (
    DocuSignError,
    ConfigurationError,
    ValidationError
)

from .configuration import AuthMode, Configuration, configure, get_defaults, reset
from .authentication import authentication_headers
from .builders import PayloadBuilder
from .multipart import MultipartEncoder, encode_upload, iter_parts
from .call_log import CallLog
from .transport import Transport
from .client import DocuSignClient
from .utility import breakout_path

__all__ = [
    '__version__',

    # Types
    'TabKind',
    'ListItem',
    'Tab',
    'Signer',
    'CarbonCopy',
    'Document',
    'EnvelopeEvent',
    'EventNotification',
    'EmailSettings',

    # Exceptions
    'DocuSignError',
    'ConfigurationError',
    'ValidationError',

    # Configuration
    'AuthMode',
    'Configuration',
    'configure',
    'get_defaults',
    'reset',

    # Services
    'authentication_headers',
    'PayloadBuilder',
    'MultipartEncoder',
    'encode_upload',
    'iter_parts',
    'CallLog',
    'Transport',
    'DocuSignClient',
    'breakout_path',
]
