"""
Request Type Definitions

Dataclasses describing the caller-side input for envelope, template and
recipient requests. Each has a from_dict() constructor accepting the loose
snake_case dict form, e.g.:

    {'email': 'a@b.com', 'name': 'A', 'embedded': True,
     'sign_here_tabs': [{'anchor_string': 'sign here'}]}

Serialization to the provider's camelCase wire format lives in builders.py.
"""

import io
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Dict, List, Optional, Union


class TabKind(Enum):
    """
    Tab collections on a recipient, valued by their wire name.

    Declaration order is the order collections appear in built payloads.
    """
    APPROVE = "approveTabs"
    CHECKBOX = "checkboxTabs"
    COMPANY = "companyTabs"
    DATE_SIGNED = "dateSignedTabs"
    DATE = "dateTabs"
    DECLINE = "declineTabs"
    EMAIL = "emailTabs"
    ENVELOPE_ID = "envelopeIdTabs"
    FULL_NAME = "fullNameTabs"
    LIST = "listTabs"
    NOTE = "noteTabs"
    NUMBER = "numberTabs"
    RADIO_GROUP = "radioGroupTabs"
    INITIAL_HERE = "initialHereTabs"
    SIGN_HERE = "signHereTabs"
    SIGNER_ATTACHMENT = "signerAttachmentTabs"
    SSN = "ssnTabs"
    TEXT = "textTabs"
    TITLE = "titleTabs"
    ZIP = "zipTabs"

    @property
    def input_key(self) -> str:
        """Snake_case key this collection is read from (e.g. 'sign_here_tabs')."""
        return f"{self.name.lower()}_tabs"

    @property
    def scales(self) -> bool:
        """Signature-like tabs carry a scaleValue."""
        return self in (TabKind.SIGN_HERE, TabKind.INITIAL_HERE)

    @classmethod
    def from_input_key(cls, key: str) -> Optional['TabKind']:
        """Look up a kind by its snake_case input key, or None."""
        key = _INPUT_KEY_ALIASES.get(key, key)
        for kind in cls:
            if kind.input_key == key:
                return kind
        return None


# Older callers spelled these differently
_INPUT_KEY_ALIASES = {
    'fullname_tabs': 'full_name_tabs',
    'initial_tabs': 'initial_here_tabs',
    'radio_tabs': 'radio_group_tabs',
}


@dataclass
class ListItem:
    """One option of a list (drop-down) tab."""
    text: str
    value: str
    selected: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ListItem':
        return cls(
            text=data.get('text', ''),
            value=data.get('value', ''),
            selected=bool(data.get('selected', False))
        )


@dataclass
class Tab:
    """
    A positioned field on a document.

    Positioning is either anchor-based (anchor_string set, offsets relative
    to the found text) or absolute (x_position/y_position on page_number).
    """
    anchor_string: Optional[str] = None
    anchor_x_offset: Optional[str] = None
    anchor_y_offset: Optional[str] = None
    ignore_anchor_if_not_present: bool = False
    x_position: Optional[str] = None
    y_position: Optional[str] = None
    document_id: Optional[str] = None
    page_number: Optional[str] = None
    label: Optional[str] = None
    name: Optional[str] = None
    value: Optional[Any] = None
    required: bool = False
    optional: bool = False
    locked: bool = False
    width: Optional[str] = None
    height: Optional[str] = None
    font: Optional[str] = None
    font_size: Optional[str] = None
    font_color: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    selected: Optional[bool] = None
    scale_value: Optional[float] = None
    conditional_parent_label: Optional[str] = None
    conditional_parent_value: Optional[str] = None
    validation_pattern: Optional[str] = None
    validation_message: Optional[str] = None
    list_items: List[ListItem] = field(default_factory=list)
    group_name: Optional[str] = None
    radios: List['Tab'] = field(default_factory=list)
    template_locked: Optional[bool] = None
    template_required: Optional[bool] = None
    tab_id: Optional[str] = None

    @property
    def anchored(self) -> bool:
        return bool(self.anchor_string)

    @classmethod
    def from_dict(cls, data: Union['Tab', Dict[str, Any]]) -> 'Tab':
        """Create a Tab from its snake_case dict form."""
        if isinstance(data, Tab):
            return data

        known = {f for f in cls.__dataclass_fields__}
        values = {k: v for k, v in data.items() if k in known and k not in ('list_items', 'radios')}

        # Alternate spelling used by older callers
        if 'anchor_ignore_if_not_present' in data and 'ignore_anchor_if_not_present' not in data:
            values['ignore_anchor_if_not_present'] = data['anchor_ignore_if_not_present']

        return cls(
            list_items=[ListItem.from_dict(i) if isinstance(i, dict) else i for i in data.get('list_items') or []],
            radios=[cls.from_dict(r) for r in data.get('radios') or []],
            **values
        )


@dataclass
class Signer:
    """
    A recipient who must sign.

    When embedded is true the provider sends no email; the host application
    requests a recipient view authenticated by client_id (defaulting to the
    signer's email).
    """
    email: Optional[str] = None
    name: Optional[str] = None
    role_name: Optional[str] = None
    recipient_id: Optional[str] = None
    routing_order: Optional[str] = None
    embedded: bool = False
    client_id: Optional[str] = None
    email_notification: Optional[Dict[str, Any]] = None
    note: Optional[str] = None
    access_code: Optional[str] = None
    id_check_configuration_name: Optional[str] = None
    custom_fields: Optional[List[Any]] = None
    template_locked: Optional[bool] = None
    template_required: Optional[bool] = None
    tabs: Dict[TabKind, List[Tab]] = field(default_factory=dict)

    @property
    def client_user_id(self) -> Optional[str]:
        """The clientUserId to emit, or None for email-delivered signers."""
        if not self.embedded:
            return None
        value = self.client_id or self.email
        return str(value) if value else None

    def tabs_of(self, kind: TabKind) -> List[Tab]:
        return self.tabs.get(kind, [])

    @classmethod
    def from_dict(cls, data: Union['Signer', Dict[str, Any]]) -> 'Signer':
        """
        Create a Signer from its dict form.

        Tab collections are read from '<kind>_tabs' keys such as
        'sign_here_tabs' or 'text_tabs'.
        """
        if isinstance(data, Signer):
            return data

        tabs: Dict[TabKind, List[Tab]] = {}
        for key, value in data.items():
            kind = TabKind.from_input_key(key)
            if kind is not None and value:
                tabs.setdefault(kind, []).extend(Tab.from_dict(t) for t in value)

        return cls(
            email=data.get('email'),
            name=data.get('name'),
            role_name=data.get('role_name'),
            recipient_id=_optional_str(data.get('recipient_id')),
            routing_order=_optional_str(data.get('routing_order')),
            embedded=bool(data.get('embedded', False)),
            client_id=data.get('client_id'),
            email_notification=data.get('email_notification'),
            note=data.get('note'),
            access_code=data.get('access_code'),
            id_check_configuration_name=data.get('id_check_configuration_name'),
            custom_fields=data.get('custom_fields'),
            template_locked=data.get('template_locked'),
            template_required=data.get('template_required'),
            tabs=tabs
        )


@dataclass
class CarbonCopy:
    """A recipient who receives a copy once the envelope completes."""
    email: Optional[str] = None
    name: Optional[str] = None
    role_name: Optional[str] = None
    note: Optional[str] = None
    email_notification: Optional[Dict[str, Any]] = None
    recipient_id: Optional[str] = None
    routing_order: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Union['CarbonCopy', Dict[str, Any]]) -> 'CarbonCopy':
        if isinstance(data, CarbonCopy):
            return data
        return cls(
            email=data.get('email'),
            name=data.get('name'),
            role_name=data.get('role_name'),
            note=data.get('note'),
            email_notification=data.get('email_notification'),
            recipient_id=_optional_str(data.get('recipient_id')),
            routing_order=_optional_str(data.get('routing_order'))
        )


@dataclass
class Document:
    """
    A file to upload.

    Exactly one source is used, in this order: content (bytes), io (an open
    binary stream), path (a local file).
    """
    path: Optional[str] = None
    io: Optional[BinaryIO] = None
    content: Optional[bytes] = None
    name: Optional[str] = None
    content_type: str = 'application/pdf'

    @property
    def filename(self) -> str:
        """Explicit name, else the base name of the path or stream."""
        if self.name:
            return self.name
        if self.path:
            return os.path.basename(self.path)
        stream_name = getattr(self.io, 'name', None)
        if isinstance(stream_name, str):
            return os.path.basename(stream_name)
        return 'document'

    def read(self) -> bytes:
        """Return the document's full contents."""
        if self.content is not None:
            return bytes(self.content)
        if self.io is not None:
            data = self.io.read()
            return data.encode('utf-8') if isinstance(data, str) else data
        if self.path:
            with open(self.path, 'rb') as f:
                return f.read()
        return b''

    @classmethod
    def from_dict(cls, data: Union['Document', Dict[str, Any]]) -> 'Document':
        if isinstance(data, Document):
            return data
        source = data.get('io')
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        return cls(
            path=data.get('path'),
            io=source,
            content=data.get('content'),
            name=data.get('name'),
            content_type=data.get('content_type') or 'application/pdf'
        )


@dataclass
class EnvelopeEvent:
    """An envelope status the provider should call back on."""
    envelope_event_status_code: str
    include_documents: bool = False

    @classmethod
    def from_dict(cls, data: Union['EnvelopeEvent', Dict[str, Any]]) -> 'EnvelopeEvent':
        if isinstance(data, EnvelopeEvent):
            return data
        return cls(
            envelope_event_status_code=data.get('envelope_event_status_code'),
            include_documents=bool(data.get('include_documents', False))
        )


@dataclass
class EventNotification:
    """Webhook subscription attached to an envelope."""
    url: str
    logging: bool = False
    use_soap_interface: bool = False
    include_certificate_with_soap: bool = False
    envelope_events: List[EnvelopeEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Union['EventNotification', Dict[str, Any]]) -> 'EventNotification':
        if isinstance(data, EventNotification):
            return data
        return cls(
            url=data.get('url'),
            logging=bool(data.get('logging', False)),
            use_soap_interface=bool(data.get('use_soap_interface', False)),
            include_certificate_with_soap=bool(data.get('include_certificate_with_soap', False)),
            envelope_events=[EnvelopeEvent.from_dict(e) for e in data.get('envelope_events') or []]
        )


@dataclass
class EmailSettings:
    """Subject and body of the provider's notification email."""
    subject: Optional[str] = None
    body: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Union['EmailSettings', Dict[str, Any], None]) -> 'EmailSettings':
        if isinstance(data, EmailSettings):
            return data
        data = data or {}
        return cls(subject=data.get('subject'), body=data.get('body'))


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
