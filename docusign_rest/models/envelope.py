"""
Model Envelope

An envelope assembled from composite templates.

Usage:
    envelope = Envelope(
        composite_templates=[CompositeTemplate(['TEMPLATE-ID'], [recipient])],
        email={'subject': 'Please sign'}
    )
    envelope.create()   # {'envelope_id': '...'}
"""

import logging
from typing import Any, Dict, List, Optional

from ..client import DocuSignClient
from ..types import EmailSettings
from .templates import CompositeTemplate

logger = logging.getLogger(__name__)


class Envelope:
    def __init__(
        self,
        composite_templates: Optional[List[CompositeTemplate]] = None,
        email: Any = None,
        status: str = 'sent',
        client: Optional[DocuSignClient] = None
    ):
        self.id: Optional[str] = None
        self.composite_templates = composite_templates
        self.email = email
        self.status = status
        self._client = client

    @property
    def client(self) -> DocuSignClient:
        """The client used to send; a default-configured one if none was given."""
        if self._client is None:
            self._client = DocuSignClient()
        return self._client

    def to_dict(self) -> Dict[str, Any]:
        email = EmailSettings.from_dict(self.email)
        data = {
            'status': self.status,
            'emailSubject': email.subject,
            'emailBlurb': email.body,
            'compositeTemplates': [c.to_dict() for c in self.composite_templates] if self.composite_templates else None,
        }
        return {k: v for k, v in data.items() if v is not None}

    def create(self) -> Dict[str, Optional[str]]:
        """
        Send the envelope.

        Returns:
            {'envelope_id': id}, None when the provider returned an error body
        """
        response = self.client.create_envelope(self)
        self.id = response.get('envelopeId')
        if self.id is None:
            logger.warning(f"Envelope not created: {response.get('errorCode')} {response.get('message')}")
        return {'envelope_id': self.id}
