"""
DocuSign Client

Envelope, template, recipient, document, folder and signing-group
operations against the DocuSign REST API.

Each operation builds its payload first (raising ValidationError on bad
input before anything is sent), resolves the account id when needed,
then performs exactly one request. Provider error bodies are returned,
not raised.

Instances are not thread-safe: they cache the account id and the last
call log. Use one client per sequential workflow.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .builders import PayloadBuilder
from .call_log import CallLog
from .configuration import Configuration, get_defaults
from .multipart import encode_upload, file_disposition
from .transport import Transport
from .types import Document, Signer

logger = logging.getLogger(__name__)


def _flag(value: bool) -> str:
    return 'true' if value else 'false'


def _without_none(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


def _save(content: bytes, local_save_path: str):
    """Write bytes to a path, creating parent directories."""
    path = Path(local_save_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    logger.debug(f"Saved {len(content)} bytes to {path}")


class DocuSignClient:
    """
    Client for DocuSign REST operations.

    Args:
        config: Base configuration (the process-wide default if omitted)
        **options: Individual options merged over the base, e.g.
            access_token='...', account_id='...'

    Provides methods for:
        - Access tokens (issue, refresh, revoke)
        - Envelopes from documents, templates or composite templates
        - Templates, embedded views, recipients and tabs
        - Document download/upload, folders and signing groups
    """

    def __init__(self, config: Optional[Configuration] = None, **options):
        base = config if config is not None else get_defaults()
        self.config = base.merge(**options)
        self.call_log = CallLog()
        self.transport = Transport(self.config, self.call_log)
        self._account_id = self.config.account_id

    @property
    def previous_call_log(self) -> Optional[List[str]]:
        """Rendered lines of the most recent request/response, if any."""
        return self.call_log.last

    @property
    def compact(self) -> bool:
        """Whether payloads omit unset fields for this API version."""
        return PayloadBuilder.compact_for(self.config.api_version)

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def get_login_information(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Fetch the accounts available to the configured credentials.

        Returns:
            Parsed body with a loginAccounts list (accountId, baseUrl, ...)
        """
        return self.transport.request_json('GET', '/login_information', headers=headers)

    def get_account_id(self) -> str:
        """
        Account id to act on.

        Uses the configured value, otherwise the first login account,
        fetched once and cached for the life of this client.
        """
        if self._account_id is None:
            login = self.get_login_information()
            self._account_id = str(login['loginAccounts'][0]['accountId'])
            logger.info(f"Resolved DocuSign account id {self._account_id}")
        return self._account_id

    def _account_path(self, suffix: str = '') -> str:
        return f"/accounts/{self.get_account_id()}{suffix}"

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def get_token(self, integrator_key: str, email: str, password: str) -> Dict[str, Any]:
        """
        Exchange credentials for a bearer token (password grant).

        Returns:
            Parsed body with access_token, token_type and scope
        """
        response = self.transport.request_json('POST', '/oauth2/token', data={
            'grant_type': 'password',
            'client_id': integrator_key,
            'username': email,
            'password': password,
            'scope': 'api',
        })
        if 'access_token' in response:
            logger.info(f"Issued DocuSign access token for {email}")
        return response

    def refresh_token(self, refresh_token: str, integrator_key: Optional[str] = None) -> Dict[str, Any]:
        """Exchange a refresh token for a new access token."""
        return self.transport.request_json('POST', '/oauth2/token', data=_without_none({
            'grant_type': 'refresh_token',
            'refresh_token': refresh_token,
            'client_id': integrator_key or self.config.integrator_key,
        }))

    def revoke_token(self, token: str) -> Dict[str, Any]:
        """Revoke an access token. The provider replies with an empty body."""
        return self.transport.request_json('POST', '/oauth2/revoke', data={'token': token})

    # ------------------------------------------------------------------
    # Envelopes
    # ------------------------------------------------------------------

    def create_envelope_from_document(
        self,
        *,
        signers: Sequence[Any],
        files: Sequence[Any],
        email: Any = None,
        status: str = 'sent',
        carbon_copies: Optional[Sequence[Any]] = None,
        event_notification: Any = None,
        custom_fields: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Create an envelope by uploading documents.

        Args:
            signers: Signer objects or dicts (see types.Signer)
            files: Document objects or dicts with path/io/content and name
            email: {'subject': ..., 'body': ...}
            status: 'sent' to dispatch now, 'created' for a draft
            carbon_copies: Recipients who receive a copy on completion
            event_notification: Webhook subscription
            custom_fields: Envelope custom fields
            headers: Caller header overrides

        Returns:
            Parsed body with envelopeId, status, statusDateTime and uri
        """
        post_body = PayloadBuilder.envelope_from_document(
            signers, files,
            email=email,
            status=status,
            carbon_copies=carbon_copies,
            event_notification=event_notification,
            custom_fields=custom_fields,
            compact=self.compact
        )
        body, content_type = encode_upload(post_body, files)

        return self.transport.request_json(
            'POST', self._account_path('/envelopes'),
            data=body, content_type=content_type, headers=headers
        )

    def create_envelope_from_template(
        self,
        *,
        template_id: str,
        signers: Sequence[Any],
        email: Any = None,
        status: str = 'sent',
        event_notification: Any = None,
        custom_fields: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Create an envelope from a stored template.

        Signers are matched to template roles by role_name.
        """
        post_body = PayloadBuilder.envelope_from_template(
            template_id, signers,
            email=email,
            status=status,
            event_notification=event_notification,
            custom_fields=custom_fields,
            compact=self.compact
        )
        return self.transport.request_json(
            'POST', self._account_path('/envelopes'), json_body=post_body, headers=headers
        )

    def create_envelope_from_composite_template(
        self,
        *,
        server_template_ids: Sequence[str],
        signers: Optional[Sequence[Any]] = None,
        files: Optional[Sequence[Any]] = None,
        email: Any = None,
        status: str = 'sent',
        event_notification: Any = None,
        brand_id: Optional[str] = None,
        allow_reassign: Optional[bool] = None,
        inline_sequence: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Create an envelope combining server templates with inline recipients.

        Sent as a multipart upload when files are given, JSON otherwise.
        """
        post_body = PayloadBuilder.envelope_from_composite_template(
            server_template_ids,
            signers=signers,
            files=files,
            email=email,
            status=status,
            event_notification=event_notification,
            brand_id=brand_id,
            allow_reassign=allow_reassign,
            inline_sequence=inline_sequence
        )

        if files:
            body, content_type = encode_upload(post_body, files)
            return self.transport.request_json(
                'POST', self._account_path('/envelopes'),
                data=body, content_type=content_type, headers=headers
            )

        return self.transport.request_json(
            'POST', self._account_path('/envelopes'), json_body=post_body, headers=headers
        )

    def create_envelope(self, envelope, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Create an envelope from a models.Envelope (or anything with to_dict())."""
        return self.transport.request_json(
            'POST', self._account_path('/envelopes'), json_body=envelope.to_dict(), headers=headers
        )

    def get_envelope_status(self, envelope_id: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self.transport.request_json(
            'GET', self._account_path(f'/envelopes/{envelope_id}'), headers=headers
        )

    def get_envelope_statuses(
        self,
        *,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        from_to_status: Optional[str] = None,
        status: Optional[str] = None,
        envelope_ids: Optional[Sequence[str]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Search envelopes by date range and status.

        Args:
            from_date: Start of the range (ISO 8601 date)
            to_date: End of the range
            from_to_status: Status change the range applies to (e.g. 'changed')
            status: Comma separated statuses to include
            envelope_ids: Restrict to these envelopes
        """
        params = _without_none({
            'from_date': from_date,
            'to_date': to_date,
            'from_to_status': from_to_status,
            'status': status,
            'envelope_ids': ','.join(envelope_ids) if envelope_ids else None,
        })
        return self.transport.request_json(
            'GET', self._account_path('/envelopes'), params=params, headers=headers
        )

    def void_envelope(
        self,
        envelope_id: str,
        voided_reason: str = 'No reason provided.',
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Void an in-process envelope."""
        return self.transport.request_json(
            'PUT', self._account_path(f'/envelopes/{envelope_id}'),
            json_body={'status': 'voided', 'voidedReason': voided_reason},
            headers=headers
        )

    def get_envelope_audit_events(self, envelope_id: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self.transport.request_json(
            'GET', self._account_path(f'/envelopes/{envelope_id}/audit_events'), headers=headers
        )

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def create_template(
        self,
        *,
        name: str,
        signers: Sequence[Any],
        files: Sequence[Any],
        description: Optional[str] = None,
        email: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Upload documents as a reusable server template.

        Returns:
            Parsed body with templateId and name
        """
        post_body = PayloadBuilder.template_definition(
            name, signers, files,
            description=description,
            email=email,
            compact=self.compact
        )
        body, content_type = encode_upload(post_body, files)

        return self.transport.request_json(
            'POST', self._account_path('/templates'),
            data=body, content_type=content_type, headers=headers
        )

    def get_template(self, template_id: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self.transport.request_json(
            'GET', self._account_path(f'/templates/{template_id}'), headers=headers
        )

    def get_templates(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self.transport.request_json('GET', self._account_path('/templates'), headers=headers)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_recipient_view(
        self,
        *,
        envelope_id: str,
        name: str,
        email: str,
        return_url: str,
        client_id: Optional[str] = None,
        authentication_method: str = 'email',
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Request a short-lived embedded signing URL.

        name, email and client_id must match the embedded signer.

        Returns:
            Parsed body with url
        """
        post_body = PayloadBuilder.recipient_view(
            name, email, return_url,
            client_id=client_id,
            authentication_method=authentication_method
        )
        return self.transport.request_json(
            'POST', self._account_path(f'/envelopes/{envelope_id}/views/recipient'),
            json_body=post_body, headers=headers
        )

    def get_console_view(
        self,
        envelope_id: Optional[str] = None,
        return_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Request a URL to the provider's web console, optionally on one envelope."""
        post_body = _without_none({'envelopeId': envelope_id, 'returnUrl': return_url})
        return self.transport.request_json(
            'POST', self._account_path('/views/console'), json_body=post_body, headers=headers
        )

    # ------------------------------------------------------------------
    # Recipients and tabs
    # ------------------------------------------------------------------

    def get_envelope_recipients(
        self,
        envelope_id: str,
        include_tabs: bool = False,
        include_extended: bool = False,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        params = {
            'include_tabs': _flag(include_tabs),
            'include_extended': _flag(include_extended),
        }
        return self.transport.request_json(
            'GET', self._account_path(f'/envelopes/{envelope_id}/recipients'),
            params=params, headers=headers
        )

    def add_envelope_signers(
        self,
        envelope_id: str,
        signers: Sequence[Any],
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Add signers (with their tabs) to a draft or in-process envelope."""
        post_body = {'signers': PayloadBuilder.signers(signers, compact=self.compact)}
        return self.transport.request_json(
            'POST', self._account_path(f'/envelopes/{envelope_id}/recipients'),
            json_body=post_body, headers=headers
        )

    def update_envelope_recipients(
        self,
        envelope_id: str,
        signers: Sequence[Any],
        resend_envelope: bool = False,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Correct existing signers, matched by recipient_id.

        With resend_envelope the provider re-sends notifications to the
        updated recipients.
        """
        updates = []
        for raw in signers:
            signer = Signer.from_dict(raw)
            updates.append(_without_none({
                'recipientId': signer.recipient_id,
                'name': signer.name,
                'email': signer.email,
                'roleName': signer.role_name,
                'routingOrder': signer.routing_order,
                'clientUserId': signer.client_user_id,
            }))

        params = {'resend_envelope': 'true'} if resend_envelope else None
        return self.transport.request_json(
            'PUT', self._account_path(f'/envelopes/{envelope_id}/recipients'),
            json_body={'signers': updates}, params=params, headers=headers
        )

    def delete_envelope_recipient(
        self,
        envelope_id: str,
        recipient_id: str,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        post_body = {'signers': [{'recipientId': str(recipient_id)}]}
        return self.transport.request_json(
            'DELETE', self._account_path(f'/envelopes/{envelope_id}/recipients'),
            json_body=post_body, headers=headers
        )

    def retrieve_tabs(
        self,
        envelope_id: str,
        recipient_id: str,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Fetch a recipient's tabs.

        Returns:
            Tab collections keyed by name, e.g. {'textTabs': [...]}
        """
        return self.transport.request_json(
            'GET', self._account_path(f'/envelopes/{envelope_id}/recipients/{recipient_id}/tabs'),
            headers=headers
        )

    def modify_tabs(
        self,
        envelope_id: str,
        recipient_id: str,
        tabs: Dict[str, List[Dict[str, Any]]],
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Update tab values; tabs are collections keyed by name, each entry with a tabId."""
        return self.transport.request_json(
            'PUT', self._account_path(f'/envelopes/{envelope_id}/recipients/{recipient_id}/tabs'),
            json_body=tabs, headers=headers
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def get_documents_from_envelope(self, envelope_id: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """List an envelope's documents (metadata only)."""
        return self.transport.request_json(
            'GET', self._account_path(f'/envelopes/{envelope_id}/documents'), headers=headers
        )

    def get_document_from_envelope(
        self,
        envelope_id: str,
        document_id: str,
        local_save_path: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> bytes:
        """Download one document as PDF bytes, optionally saving it to disk."""
        content = self.transport.request_bytes(
            'GET', self._account_path(f'/envelopes/{envelope_id}/documents/{document_id}'),
            headers=headers
        )
        if local_save_path:
            _save(content, local_save_path)
        return content

    def get_combined_document_from_envelope(
        self,
        envelope_id: str,
        local_save_path: Optional[str] = None,
        certificate: bool = False,
        headers: Optional[Dict[str, str]] = None
    ) -> bytes:
        """
        Download all documents merged into one PDF.

        Args:
            certificate: Append the certificate of completion
            local_save_path: Also write the PDF here, creating directories
        """
        params = {'certificate': 'true'} if certificate else None
        content = self.transport.request_bytes(
            'GET', self._account_path(f'/envelopes/{envelope_id}/documents/combined'),
            params=params, headers=headers
        )
        if local_save_path:
            _save(content, local_save_path)
        return content

    def get_page_image(
        self,
        envelope_id: str,
        document_id: str,
        page_number: int,
        dpi: Optional[int] = None,
        max_height: Optional[int] = None,
        max_width: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> bytes:
        """Render one document page as PNG bytes."""
        params = _without_none({'dpi': dpi, 'max_height': max_height, 'max_width': max_width})
        path = f'/envelopes/{envelope_id}/documents/{document_id}/pages/{page_number}/page_image'
        return self.transport.request_bytes(
            'GET', self._account_path(path),
            params=params or None,
            headers={'Accept': 'image/png', **(headers or {})}
        )

    def add_envelope_document(
        self,
        envelope_id: str,
        document_id: str,
        document: Any,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Add or replace a document on a draft envelope, sent as a raw binary body."""
        document = Document.from_dict(document)
        content = document.read()

        upload_headers = {
            'Content-Disposition': file_disposition(document.filename, document_id),
        }
        upload_headers.update(headers or {})

        return self.transport.request_json(
            'PUT', self._account_path(f'/envelopes/{envelope_id}/documents/{document_id}'),
            data=content, content_type=document.content_type, headers=upload_headers
        )

    def delete_envelope_document(
        self,
        envelope_id: str,
        document_ids: Sequence[str],
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        post_body = {'documents': [{'documentId': str(d)} for d in document_ids]}
        return self.transport.request_json(
            'DELETE', self._account_path(f'/envelopes/{envelope_id}/documents'),
            json_body=post_body, headers=headers
        )

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    def get_folder_list(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self.transport.request_json('GET', self._account_path('/folders'), headers=headers)

    def search_folder_for_envelopes(
        self,
        folder_id: str,
        *,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        search_text: Optional[str] = None,
        start_position: Optional[int] = None,
        count: Optional[int] = None,
        include_recipients: bool = False,
        order: Optional[str] = None,
        order_by: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        List envelopes in a folder.

        Args:
            folder_id: Folder id, or a well-known name such as 'drafts'
            order: 'asc' or 'desc'
            order_by: 'action_required', 'created', 'completed', 'sent', ...
        """
        params = _without_none({
            'from_date': from_date,
            'to_date': to_date,
            'search_text': search_text,
            'start_position': start_position,
            'count': count,
            'include_recipients': _flag(include_recipients),
            'order': order,
            'order_by': order_by,
        })
        return self.transport.request_json(
            'GET', self._account_path(f'/folders/{folder_id}'), params=params, headers=headers
        )

    def move_envelope_to_folder(
        self,
        envelope_id: str,
        folder_id: str,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        return self.transport.request_json(
            'PUT', self._account_path(f'/folders/{folder_id}'),
            json_body={'envelopeIds': [envelope_id]}, headers=headers
        )

    # ------------------------------------------------------------------
    # Signing groups
    # ------------------------------------------------------------------

    def get_signing_groups(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self.transport.request_json('GET', self._account_path('/signing_groups'), headers=headers)

    def create_signing_group(
        self,
        group_name: str,
        users: Sequence[Dict[str, str]],
        group_email: Optional[str] = None,
        group_type: str = 'sharedSigningGroup',
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Create a signing group whose members may sign on each other's behalf.

        Args:
            users: Dicts with 'user_name' and 'email'
        """
        group = _without_none({
            'groupName': group_name,
            'groupEmail': group_email,
            'groupType': group_type,
            'users': self._group_users(users),
        })
        return self.transport.request_json(
            'POST', self._account_path('/signing_groups'),
            json_body={'groups': [group]}, headers=headers
        )

    def update_signing_group_users(
        self,
        group_id: str,
        users: Sequence[Dict[str, str]],
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Add or update members of a signing group."""
        return self.transport.request_json(
            'PUT', self._account_path(f'/signing_groups/{group_id}/users'),
            json_body={'users': self._group_users(users)}, headers=headers
        )

    def delete_signing_group_users(
        self,
        group_id: str,
        users: Sequence[Dict[str, str]],
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        return self.transport.request_json(
            'DELETE', self._account_path(f'/signing_groups/{group_id}/users'),
            json_body={'users': self._group_users(users)}, headers=headers
        )

    def delete_signing_groups(
        self,
        group_ids: Sequence[str],
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        post_body = {'groups': [{'signingGroupId': str(g)} for g in group_ids]}
        return self.transport.request_json(
            'DELETE', self._account_path('/signing_groups'), json_body=post_body, headers=headers
        )

    @staticmethod
    def _group_users(users: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
        return [
            {'userName': u.get('user_name') or u.get('userName'), 'email': u.get('email')}
            for u in users
        ]
