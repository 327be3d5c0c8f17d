"""
Payload Builders

Turns typed (or loose dict) request input into the provider's JSON
structures: camelCase keys, string ids, 1-based recipient and document
numbering by input position.

Two payload shapes exist, chosen by API version:
    v1/v2   every tab collection is present; unpopulated ones are null,
            and the signer carries fixed null placeholders
    later   absent collections and unset fields are omitted

Builders never perform network I/O. Validation failures raise
ValidationError before anything is sent.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .exceptions import ValidationError
from .types import (
    CarbonCopy,
    Document,
    EmailSettings,
    EventNotification,
    Signer,
    Tab,
    TabKind,
)

logger = logging.getLogger(__name__)

ANCHOR_UNITS = 'pixels'
DEFAULT_TAB_LABEL = 'Signature 1'

# Collections a template role may pre-fill
TEMPLATE_ROLE_TAB_KINDS = (
    TabKind.TEXT,
    TabKind.CHECKBOX,
    TabKind.NUMBER,
    TabKind.FULL_NAME,
    TabKind.DATE,
)


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


def _template_flag(value: Optional[bool]) -> bool:
    return True if value is None else value


class PayloadBuilder:
    """
    Builds request bodies for envelope, template and recipient endpoints.

    All methods are classmethods and return plain dicts/lists ready for
    json serialization.
    """

    NULL_PLACEHOLDER_VERSIONS = ('v1', 'v2')

    @classmethod
    def compact_for(cls, api_version: Optional[str]) -> bool:
        """Whether payloads for this API version omit unset fields."""
        return (api_version or '').lower() not in cls.NULL_PLACEHOLDER_VERSIONS

    # ------------------------------------------------------------------
    # Recipients
    # ------------------------------------------------------------------

    @classmethod
    def signers(
        cls,
        signers: Iterable[Any],
        template: bool = False,
        compact: bool = False
    ) -> List[Dict[str, Any]]:
        """
        Build the recipients.signers array.

        Args:
            signers: Signer objects or their dict form
            template: Emit template lock/required flags on signers and tabs
            compact: Omit unset fields and unpopulated tab collections

        Returns:
            List of signer dicts; recipientId/routingOrder default to the
            1-based input position
        """
        doc_signers = []

        for index, raw in enumerate(signers or []):
            signer = Signer.from_dict(raw)
            position = str(index + 1)
            recipient_id = signer.recipient_id or position

            doc_signer = {
                'email': signer.email,
                'name': signer.name,
                'recipientId': recipient_id,
                'routingOrder': signer.routing_order or position,
                'roleName': signer.role_name,
                'accessCode': signer.access_code if signer.access_code is not None else ('' if not compact else None),
                'addAccessCodeToEmail': False,
                'customFields': signer.custom_fields,
                'idCheckConfigurationName': signer.id_check_configuration_name,
                'idCheckInformationInput': None,
                'inheritEmailNotificationConfiguration': False,
                'note': signer.note,
                'phoneAuthentication': None,
                'recipientAttachment': None,
                'requireIdLookup': False,
                'socialAuthentications': None,
            }

            if signer.email_notification:
                doc_signer['emailNotification'] = signer.email_notification

            # Embedded signers get no email and authenticate by client id
            client_user_id = cls._client_user_id(signer, index)
            if client_user_id:
                doc_signer['clientUserId'] = client_user_id

            if template:
                doc_signer['templateAccessCodeRequired'] = False
                doc_signer['templateLocked'] = _template_flag(signer.template_locked)
                doc_signer['templateRequired'] = _template_flag(signer.template_required)

            doc_signer['autoNavigation'] = False
            doc_signer['defaultRecipient'] = False
            doc_signer['signatureInfo'] = None
            doc_signer['tabs'] = cls.signer_tabs(signer, recipient_id, template=template, compact=compact)

            if compact:
                doc_signer = _compact(doc_signer)

            doc_signers.append(doc_signer)

        logger.debug(f"Built {len(doc_signers)} signer(s)")
        return doc_signers

    @classmethod
    def _client_user_id(cls, signer: Signer, index: int) -> Optional[str]:
        """clientUserId for an embedded signer; it needs an email or client id."""
        if signer.embedded and signer.client_user_id is None:
            raise ValidationError(
                f"Embedded signer {index + 1} requires an email or client_id",
                field='email',
                index=index
            )
        return signer.client_user_id

    @classmethod
    def signer_tabs(
        cls,
        signer: Signer,
        recipient_id: str,
        template: bool = False,
        compact: bool = False
    ) -> Optional[Dict[str, Any]]:
        """
        Build the tabs object for one signer, grouped by collection.

        Returns None in compact mode when the signer has no tabs at all.
        """
        tabs: Dict[str, Any] = {}

        for kind in TabKind:
            entries = signer.tabs_of(kind)
            if entries:
                tabs[kind.value] = cls.tabs(kind, entries, recipient_id, template=template)
            elif not compact:
                tabs[kind.value] = None

        if compact and not tabs:
            return None
        return tabs

    @classmethod
    def tabs(
        cls,
        kind: TabKind,
        tabs: Sequence[Any],
        recipient_id: str,
        template: bool = False
    ) -> List[Dict[str, Any]]:
        """Build every tab of one collection."""
        if kind == TabKind.RADIO_GROUP:
            return [cls.radio_group(Tab.from_dict(t), recipient_id, template=template) for t in tabs]
        return [cls.tab(kind, Tab.from_dict(t), recipient_id, template=template) for t in tabs]

    @classmethod
    def tab(
        cls,
        kind: TabKind,
        tab: Tab,
        recipient_id: str,
        template: bool = False
    ) -> Dict[str, Any]:
        """
        Build one positioned tab.

        Anchored tabs carry anchor fields and no x/y position; all others
        carry xPosition/yPosition defaulting to '0'.
        """
        tab_hash = cls._position(tab)

        if tab.conditional_parent_label is not None:
            tab_hash['conditionalParentLabel'] = tab.conditional_parent_label
        if tab.conditional_parent_value is not None:
            tab_hash['conditionalParentValue'] = tab.conditional_parent_value

        tab_hash['documentId'] = str(tab.document_id or '1')
        tab_hash['pageNumber'] = str(tab.page_number or '1')
        tab_hash['recipientId'] = recipient_id
        tab_hash['required'] = tab.required

        if template:
            tab_hash['templateLocked'] = _template_flag(tab.template_locked)
            tab_hash['templateRequired'] = _template_flag(tab.template_required)

        if kind.scales:
            tab_hash['scaleValue'] = tab.scale_value if tab.scale_value is not None else 1

        tab_hash['optional'] = tab.optional
        tab_hash['tabLabel'] = tab.label or DEFAULT_TAB_LABEL
        tab_hash['locked'] = tab.locked

        optional_fields = (
            ('tabId', tab.tab_id),
            ('name', tab.name),
            ('width', tab.width),
            ('height', tab.height),
            ('value', tab.value),
            ('font', tab.font),
            ('fontSize', tab.font_size),
            ('fontColor', tab.font_color),
            ('bold', tab.bold),
            ('italic', tab.italic),
            ('underline', tab.underline),
            ('selected', tab.selected),
            ('validationPattern', tab.validation_pattern),
            ('validationMessage', tab.validation_message),
        )
        for key, value in optional_fields:
            if value is not None:
                tab_hash[key] = value

        if tab.list_items:
            tab_hash['listItems'] = [
                {'text': item.text, 'value': item.value, 'selected': item.selected}
                for item in tab.list_items
            ]

        return tab_hash

    @classmethod
    def radio_group(cls, group: Tab, recipient_id: str, template: bool = False) -> Dict[str, Any]:
        """Build a radio group tab; each radio is positioned on its own."""
        if not group.group_name:
            raise ValidationError("Radio group tab requires a group_name", field='group_name')

        group_hash = {
            'documentId': str(group.document_id or '1'),
            'recipientId': recipient_id,
            'groupName': group.group_name,
        }

        if template:
            group_hash['templateLocked'] = _template_flag(group.template_locked)
            group_hash['templateRequired'] = _template_flag(group.template_required)

        radios = []
        for radio in group.radios:
            radio_hash = cls._position(radio)
            radio_hash['pageNumber'] = str(radio.page_number or group.page_number or '1')
            radio_hash['value'] = radio.value
            radio_hash['selected'] = bool(radio.selected)
            radio_hash['required'] = radio.required
            radio_hash['locked'] = radio.locked
            radios.append(radio_hash)

        group_hash['radios'] = radios
        return group_hash

    @classmethod
    def _position(cls, tab: Tab) -> Dict[str, Any]:
        if tab.anchored:
            return {
                'anchorString': tab.anchor_string,
                'anchorXOffset': str(tab.anchor_x_offset or '0'),
                'anchorYOffset': str(tab.anchor_y_offset or '0'),
                'anchorIgnoreIfNotPresent': bool(tab.ignore_anchor_if_not_present),
                'anchorUnits': ANCHOR_UNITS,
            }
        return {
            'xPosition': str(tab.x_position or '0'),
            'yPosition': str(tab.y_position or '0'),
        }

    @classmethod
    def carbon_copies(cls, copies: Iterable[Any], signer_count: int) -> List[Dict[str, Any]]:
        """
        Build the recipients.carbonCopies array.

        Ids and routing order continue after the last signer.

        Raises:
            ValidationError: If any entry lacks an email or a name
        """
        result = []
        counter = signer_count

        for index, raw in enumerate(copies or []):
            cc = CarbonCopy.from_dict(raw)

            if not cc.email or not cc.name:
                missing = 'email' if not cc.email else 'name'
                raise ValidationError(
                    f"Carbon copy {index + 1} is missing required data [email, name]",
                    field=missing,
                    index=index
                )

            counter += 1
            entry = {
                'email': cc.email,
                'name': cc.name,
                'recipientId': cc.recipient_id or str(counter),
                'routingOrder': cc.routing_order or str(counter),
            }
            if cc.role_name:
                entry['roleName'] = cc.role_name
            if cc.note:
                entry['note'] = cc.note
            if cc.email_notification:
                entry['emailNotification'] = cc.email_notification

            result.append(entry)

        return result

    @classmethod
    def template_roles(cls, signers: Iterable[Any], compact: bool = False) -> List[Dict[str, Any]]:
        """
        Build templateRoles for an envelope created from a stored template.

        Roles are matched by roleName; tabs only pre-fill values by label.
        """
        roles = []

        for index, raw in enumerate(signers or []):
            signer = Signer.from_dict(raw)

            tabs = {}
            for kind in TEMPLATE_ROLE_TAB_KINDS:
                values = [cls._tab_value(t, compact) for t in signer.tabs_of(kind)]
                if values or not compact:
                    tabs[kind.value] = values

            role = {
                'name': signer.name,
                'email': signer.email,
                'roleName': signer.role_name,
                'tabs': tabs,
            }
            if signer.email_notification:
                role['emailNotification'] = signer.email_notification
            client_user_id = cls._client_user_id(signer, index)
            if client_user_id:
                role['clientUserId'] = client_user_id

            roles.append(_compact(role) if compact else role)

        return roles

    @classmethod
    def _tab_value(cls, tab: Tab, compact: bool) -> Dict[str, Any]:
        value = {
            'tabLabel': tab.label,
            'name': tab.name,
            'value': tab.value,
            'documentId': tab.document_id,
            'selected': tab.selected,
            'locked': tab.locked,
        }
        return _compact(value) if compact else value

    # ------------------------------------------------------------------
    # Documents and notifications
    # ------------------------------------------------------------------

    @classmethod
    def documents(cls, files: Iterable[Any]) -> List[Dict[str, str]]:
        """Document entries numbered by upload order."""
        return [
            {'documentId': str(index + 1), 'name': Document.from_dict(f).filename}
            for index, f in enumerate(files or [])
        ]

    @classmethod
    def event_notification(cls, notification: Any) -> Dict[str, Any]:
        """Webhook subscription, or {} when none was requested."""
        if not notification:
            return {}

        notification = EventNotification.from_dict(notification)
        return {
            'useSoapInterface': notification.use_soap_interface,
            'includeCertificateWithSoap': notification.include_certificate_with_soap,
            'url': notification.url,
            'loggingEnabled': notification.logging,
            'envelopeEvents': [
                {
                    'includeDocuments': event.include_documents,
                    'envelopeEventStatusCode': event.envelope_event_status_code,
                }
                for event in notification.envelope_events
            ],
        }

    # ------------------------------------------------------------------
    # Composite templates
    # ------------------------------------------------------------------

    @classmethod
    def inline_signers(cls, signers: Iterable[Any], sequence: int) -> Dict[str, Any]:
        """An inline template carrying full signer definitions."""
        signers_array = []

        for index, raw in enumerate(signers or []):
            signer = Signer.from_dict(raw)
            recipient_id = signer.recipient_id or str(index + 1)

            signer_hash = _compact({
                'email': signer.email,
                'name': signer.name,
                'recipientId': recipient_id,
                'routingOrder': signer.routing_order,
                'roleName': signer.role_name,
                'clientUserId': cls._client_user_id(signer, index),
                'emailNotification': signer.email_notification,
                'tabs': cls.signer_tabs(signer, recipient_id, compact=True),
            })
            signers_array.append(signer_hash)

        return {
            'sequence': str(sequence),
            'recipients': {'signers': signers_array},
        }

    @classmethod
    def composite_templates(
        cls,
        server_template_ids: Sequence[str],
        signers: Optional[Iterable[Any]] = None,
        files: Optional[Sequence[Any]] = None,
        inline_sequence: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Build compositeTemplates, one per server template id.

        Each server template sits at sequence i+1. When signers are given,
        an inline template with those recipients is attached at the same
        sequence, or at inline_sequence when given.

        Raises:
            ValidationError: On no template ids, more files than template
                ids, or an inline sequence before its server template's
        """
        if not server_template_ids:
            raise ValidationError("At least one server template id is required", field='server_template_ids')
        if files and len(files) > len(server_template_ids):
            raise ValidationError(
                f"{len(files)} files for {len(server_template_ids)} server templates; each file needs a template",
                field='files'
            )

        signers = list(signers or [])
        documents = cls.documents(files) if files else []
        composites = []

        for index, template_id in enumerate(server_template_ids):
            sequence = index + 1
            composite: Dict[str, Any] = {
                'serverTemplates': [{'sequence': str(sequence), 'templateId': template_id}],
            }
            if signers:
                inline_at = sequence if inline_sequence is None else int(inline_sequence)
                if inline_at < sequence:
                    raise ValidationError(
                        f"Inline template sequence {inline_at} precedes server template sequence {sequence}",
                        field='inline_sequence',
                        index=index
                    )
                composite['inlineTemplates'] = [cls.inline_signers(signers, inline_at)]
            if index < len(documents):
                composite['document'] = documents[index]
            composites.append(composite)

        return composites

    # ------------------------------------------------------------------
    # Whole request bodies
    # ------------------------------------------------------------------

    @classmethod
    def envelope_from_document(
        cls,
        signers: Sequence[Any],
        files: Sequence[Any],
        email: Any = None,
        status: str = 'sent',
        carbon_copies: Optional[Sequence[Any]] = None,
        event_notification: Any = None,
        custom_fields: Optional[Dict[str, Any]] = None,
        compact: bool = False
    ) -> Dict[str, Any]:
        """Body for creating an envelope from uploaded documents."""
        if not files:
            raise ValidationError("At least one file is required", field='files')

        email = EmailSettings.from_dict(email)
        signers = list(signers or [])

        recipients: Dict[str, Any] = {'signers': cls.signers(signers, compact=compact)}
        if carbon_copies:
            recipients['carbonCopies'] = cls.carbon_copies(carbon_copies, len(signers))

        body = {
            'emailBlurb': email.body or '',
            'emailSubject': email.subject or '',
            'documents': cls.documents(files),
            'recipients': recipients,
            'status': status,
        }
        if event_notification:
            body['eventNotification'] = cls.event_notification(event_notification)
        if custom_fields:
            body['customFields'] = custom_fields

        return body

    @classmethod
    def template_definition(
        cls,
        name: str,
        signers: Sequence[Any],
        files: Sequence[Any],
        description: Optional[str] = None,
        email: Any = None,
        compact: bool = False
    ) -> Dict[str, Any]:
        """Body for creating a reusable server template."""
        if not name:
            raise ValidationError("Template name is required", field='name')
        if not files:
            raise ValidationError("At least one file is required", field='files')

        email = EmailSettings.from_dict(email)
        return {
            'emailBlurb': email.body or '',
            'emailSubject': email.subject or '',
            'documents': cls.documents(files),
            'recipients': {'signers': cls.signers(signers, template=True, compact=compact)},
            'envelopeTemplateDefinition': {
                'description': description,
                'name': name,
                'pageCount': 1,
                'password': '',
                'shared': False,
            },
        }

    @classmethod
    def envelope_from_template(
        cls,
        template_id: str,
        signers: Sequence[Any],
        email: Any = None,
        status: str = 'sent',
        event_notification: Any = None,
        custom_fields: Optional[Dict[str, Any]] = None,
        compact: bool = False
    ) -> Dict[str, Any]:
        """Body for creating an envelope from a stored template."""
        if not template_id:
            raise ValidationError("template_id is required", field='template_id')

        email = EmailSettings.from_dict(email)
        body = {
            'status': status,
            'emailBlurb': email.body,
            'emailSubject': email.subject,
            'templateId': template_id,
            'eventNotification': cls.event_notification(event_notification),
            'templateRoles': cls.template_roles(signers, compact=compact),
            'customFields': custom_fields,
        }
        return _compact(body) if compact else body

    @classmethod
    def envelope_from_composite_template(
        cls,
        server_template_ids: Sequence[str],
        signers: Optional[Sequence[Any]] = None,
        files: Optional[Sequence[Any]] = None,
        email: Any = None,
        status: str = 'sent',
        event_notification: Any = None,
        brand_id: Optional[str] = None,
        allow_reassign: Optional[bool] = None,
        inline_sequence: Optional[int] = None
    ) -> Dict[str, Any]:
        """Body for creating an envelope from composite templates."""
        email = EmailSettings.from_dict(email)
        body = {
            'emailBlurb': email.body or '',
            'emailSubject': email.subject or '',
            'status': status,
            'brandId': brand_id,
            'eventNotification': cls.event_notification(event_notification),
            'allowReassign': allow_reassign,
            'compositeTemplates': cls.composite_templates(
                server_template_ids, signers, files=files, inline_sequence=inline_sequence
            ),
        }
        return _compact(body)

    @classmethod
    def recipient_view(
        cls,
        name: str,
        email: str,
        return_url: str,
        client_id: Optional[str] = None,
        authentication_method: str = 'email'
    ) -> Dict[str, Any]:
        """Body for requesting an embedded signing URL."""
        if not return_url:
            raise ValidationError("return_url is required", field='return_url')

        return {
            'authenticationMethod': authentication_method,
            'clientUserId': client_id or email,
            'email': email,
            'returnUrl': return_url,
            'userName': name,
        }
