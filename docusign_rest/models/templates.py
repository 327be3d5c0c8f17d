"""
Model Templates

Server, inline and composite templates for envelopes built from stored
templates. Sequence numbers order how the provider overlays documents,
recipients and tabs across templates.
"""

from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import ValidationError
from .recipient import Recipient


class Template:
    def __init__(self, sequence: Optional[int] = None):
        self.sequence = sequence

    def to_dict(self) -> Dict[str, Any]:
        if self.sequence is None:
            return {}
        return {'sequence': str(self.sequence)}


class ServerTemplate(Template):
    """Reference to a template stored on the provider."""

    def __init__(self, sequence: Optional[int] = None, template_id: Optional[str] = None):
        super().__init__(sequence=sequence)
        self.template_id = template_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['templateId'] = self.template_id
        return data

    @classmethod
    def from_template_ids(cls, template_ids: Optional[Sequence[str]]) -> Optional[List['ServerTemplate']]:
        """One server template per id at sequences 1..N; None for no ids."""
        if not template_ids:
            return None
        return [
            cls(sequence=sequence, template_id=template_id)
            for sequence, template_id in enumerate(template_ids, 1)
        ]


class InlineTemplate(Template):
    """Recipients defined at request time."""

    def __init__(self, sequence: Optional[int] = None, recipients: Optional[List[Recipient]] = None):
        super().__init__(sequence=sequence)
        self.recipients = recipients

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.recipients:
            data['recipients'] = {'signers': [r.to_dict() for r in self.recipients]}
        return data


class CompositeTemplate(Template):
    """
    Server templates plus an optional inline template of recipients.

    Recipients sharing an id are merged into one signer.

    Raises:
        ValidationError: If inline_sequence is not a positive integer
    """

    def __init__(
        self,
        server_template_ids: Optional[Sequence[str]] = None,
        recipients: Optional[List[Recipient]] = None,
        inline_sequence: int = 1
    ):
        super().__init__()
        self.server_templates = ServerTemplate.from_template_ids(server_template_ids)
        self.inline_templates = None

        if recipients:
            if not isinstance(inline_sequence, int) or inline_sequence < 1:
                raise ValidationError(
                    f"Inline template sequence must be a positive integer, got {inline_sequence!r}",
                    field='inline_sequence'
                )
            self.inline_templates = [
                InlineTemplate(sequence=inline_sequence, recipients=Recipient.merge(recipients))
            ]

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.server_templates:
            data['serverTemplates'] = [t.to_dict() for t in self.server_templates]
        if self.inline_templates:
            data['inlineTemplates'] = [t.to_dict() for t in self.inline_templates]
        return data
