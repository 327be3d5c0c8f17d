"""
Payload Builder Tests

Covers recipient numbering, tab positioning, embedded signers, the two
payload shapes, carbon copy validation and composite templates.

Run with: python -m pytest tests/test_builders.py -v
"""

import pytest

from docusign_rest.builders import PayloadBuilder
from docusign_rest.exceptions import ValidationError
from docusign_rest.types import Signer, Tab, TabKind


ANCHORED_SIGNER = {
    'name': 'Ann Buyer',
    'email': 'ann@test.com',
    'embedded': True,
    'sign_here_tabs': [{'anchor_string': 'sign here'}],
}

PLAIN_SIGNER = {
    'name': 'Bob Seller',
    'email': 'bob@test.com',
}


class TestSignerNumbering:

    def test_ids_follow_input_order(self):
        """N signers without ids get recipient ids 1..N."""
        signers = [{'name': f'S{i}', 'email': f's{i}@test.com'} for i in range(4)]
        built = PayloadBuilder.signers(signers)

        assert [s['recipientId'] for s in built] == ['1', '2', '3', '4']
        assert [s['routingOrder'] for s in built] == ['1', '2', '3', '4']

    def test_explicit_ids_override(self):
        """Caller-supplied ids and routing order win."""
        built = PayloadBuilder.signers([
            {'name': 'A', 'email': 'a@test.com', 'recipient_id': 7, 'routing_order': 2},
            PLAIN_SIGNER,
        ])

        assert built[0]['recipientId'] == '7'
        assert built[0]['routingOrder'] == '2'
        assert built[1]['recipientId'] == '2'

    def test_accepts_typed_signers(self):
        """Signer objects are used as-is."""
        signer = Signer(name='Typed', email='typed@test.com', role_name='Buyer')
        built = PayloadBuilder.signers([signer])
        assert built[0]['roleName'] == 'Buyer'


class TestEmbeddedSigners:

    def test_embedded_defaults_client_user_id_to_email(self):
        """Embedded without a client id uses the email."""
        built = PayloadBuilder.signers([ANCHORED_SIGNER])
        assert built[0]['clientUserId'] == 'ann@test.com'

    def test_explicit_client_id(self):
        """An explicit client id is used when embedded."""
        signer = dict(ANCHORED_SIGNER, client_id='user-42')
        assert PayloadBuilder.signers([signer])[0]['clientUserId'] == 'user-42'

    def test_not_embedded_has_no_client_user_id(self):
        """Email-delivered signers carry no clientUserId."""
        built = PayloadBuilder.signers([dict(PLAIN_SIGNER, client_id='ignored')])
        assert 'clientUserId' not in built[0]

    def test_embedded_without_email_or_client_id(self):
        """No identity to authenticate with is rejected, never sent as 'None'."""
        assert Signer(name='Nobody', embedded=True).client_user_id is None

        with pytest.raises(ValidationError) as exc_info:
            PayloadBuilder.signers([PLAIN_SIGNER, {'name': 'Nobody', 'embedded': True}])

        assert exc_info.value.field == 'email'
        assert exc_info.value.index == 1

    def test_embedded_without_identity_rejected_everywhere(self):
        signer = {'name': 'Nobody', 'role_name': 'Client', 'embedded': True}
        with pytest.raises(ValidationError):
            PayloadBuilder.template_roles([signer])
        with pytest.raises(ValidationError):
            PayloadBuilder.inline_signers([signer], 1)


class TestPayloadShapes:

    def test_null_shape_lists_every_category(self):
        """v1/v2 payloads include all tab categories, unpopulated ones null."""
        built = PayloadBuilder.signers([ANCHORED_SIGNER])
        tabs = built[0]['tabs']

        assert set(tabs) == {kind.value for kind in TabKind}
        assert len(tabs) == 20
        assert tabs['textTabs'] is None
        assert len(tabs['signHereTabs']) == 1

    def test_null_shape_placeholders(self):
        """Fixed signer placeholders are present in the null shape."""
        signer = PayloadBuilder.signers([PLAIN_SIGNER])[0]

        assert signer['accessCode'] == ''
        assert signer['addAccessCodeToEmail'] is False
        assert signer['requireIdLookup'] is False
        assert signer['phoneAuthentication'] is None
        assert signer['signatureInfo'] is None
        assert 'socialAuthentications' in signer

    def test_compact_shape_omits_absent(self):
        """Later API versions omit unset fields and empty categories."""
        signer = PayloadBuilder.signers([ANCHORED_SIGNER], compact=True)[0]

        assert list(signer['tabs']) == ['signHereTabs']
        assert 'phoneAuthentication' not in signer
        assert 'accessCode' not in signer
        assert 'note' not in signer

    def test_compact_shape_without_tabs(self):
        """A signer with no tabs has no tabs key in the compact shape."""
        signer = PayloadBuilder.signers([PLAIN_SIGNER], compact=True)[0]
        assert 'tabs' not in signer

    def test_compact_for_version(self):
        """v1 and v2 use the null shape; later versions are compact."""
        assert PayloadBuilder.compact_for('v2') is False
        assert PayloadBuilder.compact_for('v1') is False
        assert PayloadBuilder.compact_for('v2.1') is True


class TestTabs:

    def test_anchor_tab(self):
        """Anchored tabs carry anchor fields and no x/y."""
        tab = PayloadBuilder.tab(TabKind.SIGN_HERE, Tab(anchor_string='sign here'), '1')

        assert tab['anchorString'] == 'sign here'
        assert tab['anchorXOffset'] == '0'
        assert tab['anchorYOffset'] == '0'
        assert tab['anchorIgnoreIfNotPresent'] is False
        assert tab['anchorUnits'] == 'pixels'
        assert 'xPosition' not in tab
        assert 'yPosition' not in tab

    def test_anchor_offsets_kept(self):
        """Explicit offsets and ignore flag are emitted."""
        tab = PayloadBuilder.tab(
            TabKind.SIGN_HERE,
            Tab.from_dict({'anchor_string': 'x', 'anchor_x_offset': '10', 'anchor_y_offset': '-5',
                           'ignore_anchor_if_not_present': True}),
            '1'
        )
        assert tab['anchorXOffset'] == '10'
        assert tab['anchorYOffset'] == '-5'
        assert tab['anchorIgnoreIfNotPresent'] is True

    def test_positioned_tab_defaults(self):
        """Tabs without anchors default to position 0,0 on document 1 page 1."""
        tab = PayloadBuilder.tab(TabKind.TEXT, Tab(), '2')

        assert tab['xPosition'] == '0'
        assert tab['yPosition'] == '0'
        assert tab['documentId'] == '1'
        assert tab['pageNumber'] == '1'
        assert tab['recipientId'] == '2'
        assert tab['tabLabel'] == 'Signature 1'
        assert tab['required'] is False
        assert tab['optional'] is False
        assert tab['locked'] is False
        assert 'anchorString' not in tab

    def test_scale_value_only_on_signature_tabs(self):
        """Sign-here and initial-here tabs carry scaleValue."""
        assert PayloadBuilder.tab(TabKind.SIGN_HERE, Tab(), '1')['scaleValue'] == 1
        assert PayloadBuilder.tab(TabKind.INITIAL_HERE, Tab(scale_value=0.5), '1')['scaleValue'] == 0.5
        assert 'scaleValue' not in PayloadBuilder.tab(TabKind.TEXT, Tab(), '1')

    def test_optional_extras_only_when_set(self):
        """Font and validation fields appear only when given."""
        bare = PayloadBuilder.tab(TabKind.TEXT, Tab(), '1')
        assert 'font' not in bare
        assert 'value' not in bare

        styled = PayloadBuilder.tab(
            TabKind.TEXT,
            Tab(font='helvetica', font_size='size12', bold=True, value='hello',
                validation_pattern='^[0-9]+$', conditional_parent_label='agree',
                conditional_parent_value='on'),
            '1'
        )
        assert styled['font'] == 'helvetica'
        assert styled['fontSize'] == 'size12'
        assert styled['bold'] is True
        assert styled['value'] == 'hello'
        assert styled['validationPattern'] == '^[0-9]+$'
        assert styled['conditionalParentLabel'] == 'agree'
        assert styled['conditionalParentValue'] == 'on'

    def test_list_items(self):
        """List tabs emit listItems."""
        tab = Tab.from_dict({'label': 'colour', 'list_items': [
            {'text': 'Red', 'value': 'red', 'selected': True},
            {'text': 'Blue', 'value': 'blue'},
        ]})
        built = PayloadBuilder.tab(TabKind.LIST, tab, '1')

        assert built['listItems'] == [
            {'text': 'Red', 'value': 'red', 'selected': True},
            {'text': 'Blue', 'value': 'blue', 'selected': False},
        ]

    def test_radio_group(self):
        """Radio groups emit groupName and positioned radios."""
        signer = {
            'name': 'A', 'email': 'a@test.com',
            'radio_group_tabs': [{
                'group_name': 'plan',
                'radios': [
                    {'value': 'basic', 'x_position': '100', 'y_position': '200', 'selected': True},
                    {'value': 'pro', 'anchor_string': 'pro plan'},
                ],
            }],
        }
        group = PayloadBuilder.signers([signer])[0]['tabs']['radioGroupTabs'][0]

        assert group['groupName'] == 'plan'
        assert group['recipientId'] == '1'
        assert group['radios'][0] == {
            'xPosition': '100', 'yPosition': '200', 'pageNumber': '1',
            'value': 'basic', 'selected': True, 'required': False, 'locked': False,
        }
        assert group['radios'][1]['anchorString'] == 'pro plan'
        assert 'xPosition' not in group['radios'][1]

    def test_radio_group_requires_name(self):
        """A radio group without group_name is rejected."""
        with pytest.raises(ValidationError):
            PayloadBuilder.signers([{'name': 'A', 'email': 'a@test.com', 'radio_tabs': [{'radios': []}]}])

    def test_input_key_aliases(self):
        """Older key spellings map to the same collections."""
        signer = Signer.from_dict({'fullname_tabs': [{}], 'initial_tabs': [{}]})
        assert len(signer.tabs_of(TabKind.FULL_NAME)) == 1
        assert len(signer.tabs_of(TabKind.INITIAL_HERE)) == 1


class TestTemplateMode:

    def test_template_flags_default_true(self):
        """Template mode locks and requires signer and tabs by default."""
        signer = PayloadBuilder.signers([ANCHORED_SIGNER], template=True)[0]

        assert signer['templateAccessCodeRequired'] is False
        assert signer['templateLocked'] is True
        assert signer['templateRequired'] is True
        tab = signer['tabs']['signHereTabs'][0]
        assert tab['templateLocked'] is True
        assert tab['templateRequired'] is True

    def test_template_flags_overridable(self):
        """Explicit false flags are kept."""
        signer = dict(PLAIN_SIGNER, template_locked=False,
                      text_tabs=[{'label': 'note', 'template_required': False}])
        built = PayloadBuilder.signers([signer], template=True)[0]

        assert built['templateLocked'] is False
        assert built['tabs']['textTabs'][0]['templateRequired'] is False

    def test_no_template_flags_outside_template_mode(self):
        signer = PayloadBuilder.signers([ANCHORED_SIGNER])[0]
        assert 'templateLocked' not in signer
        assert 'templateLocked' not in signer['tabs']['signHereTabs'][0]


class TestCarbonCopies:

    def test_numbering_continues_after_signers(self):
        """Carbon copies take the slots after the last signer."""
        copies = PayloadBuilder.carbon_copies([
            {'name': 'CC One', 'email': 'cc1@test.com'},
            {'name': 'CC Two', 'email': 'cc2@test.com'},
        ], signer_count=2)

        assert [c['recipientId'] for c in copies] == ['3', '4']
        assert [c['routingOrder'] for c in copies] == ['3', '4']

    def test_missing_email_raises(self):
        """A carbon copy without email fails fast."""
        with pytest.raises(ValidationError) as exc:
            PayloadBuilder.carbon_copies([
                {'name': 'CC One', 'email': 'cc1@test.com'},
                {'name': 'No Email'},
            ], signer_count=1)

        assert exc.value.field == 'email'
        assert exc.value.index == 1

    def test_missing_name_raises(self):
        with pytest.raises(ValidationError) as exc:
            PayloadBuilder.carbon_copies([{'email': 'cc@test.com'}], signer_count=0)
        assert exc.value.field == 'name'


class TestDocumentsAndNotifications:

    def test_document_ids_follow_upload_order(self):
        """Documents are numbered 1..N with display names."""
        docs = PayloadBuilder.documents([
            {'path': '/tmp/contract.pdf'},
            {'content': b'x', 'name': 'Addendum.pdf'},
        ])
        assert docs == [
            {'documentId': '1', 'name': 'contract.pdf'},
            {'documentId': '2', 'name': 'Addendum.pdf'},
        ]

    def test_event_notification_absent(self):
        assert PayloadBuilder.event_notification(None) == {}

    def test_event_notification(self):
        """Webhook subscriptions map to provider keys."""
        built = PayloadBuilder.event_notification({
            'url': 'https://app.test/hook',
            'logging': True,
            'envelope_events': [{'envelope_event_status_code': 'completed', 'include_documents': True}],
        })
        assert built == {
            'useSoapInterface': False,
            'includeCertificateWithSoap': False,
            'url': 'https://app.test/hook',
            'loggingEnabled': True,
            'envelopeEvents': [{'includeDocuments': True, 'envelopeEventStatusCode': 'completed'}],
        }


class TestTemplateRoles:

    def test_role_tabs(self):
        """Template roles pre-fill tab values by label."""
        roles = PayloadBuilder.template_roles([{
            'name': 'Ann', 'email': 'ann@test.com', 'role_name': 'Buyer', 'embedded': True,
            'text_tabs': [{'label': 'address', 'value': '1 Main St'}],
            'checkbox_tabs': [{'label': 'agree', 'selected': True}],
        }])
        role = roles[0]

        assert role['roleName'] == 'Buyer'
        assert role['clientUserId'] == 'ann@test.com'
        assert role['tabs']['textTabs'][0]['tabLabel'] == 'address'
        assert role['tabs']['textTabs'][0]['value'] == '1 Main St'
        assert role['tabs']['checkboxTabs'][0]['selected'] is True
        assert role['tabs']['dateTabs'] == []
        assert 'signHereTabs' not in role['tabs']


class TestCompositeTemplates:

    def test_one_entry_per_server_template(self):
        """Each server template sits at sequence i+1 with inline recipients alongside."""
        composites = PayloadBuilder.composite_templates(['T-1', 'T-2'], signers=[ANCHORED_SIGNER])

        assert [c['serverTemplates'][0]['sequence'] for c in composites] == ['1', '2']
        assert [c['serverTemplates'][0]['templateId'] for c in composites] == ['T-1', 'T-2']
        inline = composites[0]['inlineTemplates'][0]
        assert inline['sequence'] == '1'
        signer = inline['recipients']['signers'][0]
        assert signer['clientUserId'] == 'ann@test.com'
        assert list(signer['tabs']) == ['signHereTabs']

    def test_inline_at_following_sequence(self):
        composites = PayloadBuilder.composite_templates(['T-1'], signers=[PLAIN_SIGNER], inline_sequence=2)
        assert composites[0]['inlineTemplates'][0]['sequence'] == '2'

    def test_inline_before_server_template_rejected(self):
        """An inline template may not precede its server template."""
        with pytest.raises(ValidationError):
            PayloadBuilder.composite_templates(['T-1', 'T-2'], signers=[PLAIN_SIGNER], inline_sequence=1)

    def test_requires_template_ids(self):
        with pytest.raises(ValidationError):
            PayloadBuilder.composite_templates([])

    def test_no_inline_without_signers(self):
        composites = PayloadBuilder.composite_templates(['T-1'])
        assert 'inlineTemplates' not in composites[0]

    def test_more_files_than_templates_rejected(self):
        """A file with no server template to carry it is an error, not dropped."""
        files = [{'name': 'a.pdf', 'content': b'%PDF-1.4'}, {'name': 'b.pdf', 'content': b'%PDF-1.4'}]
        with pytest.raises(ValidationError) as exc_info:
            PayloadBuilder.composite_templates(['T-1'], signers=[PLAIN_SIGNER], files=files)

        assert exc_info.value.field == 'files'


class TestWholeBodies:

    def test_envelope_from_document_scenario(self):
        """Two signers, two files: ids, clientUserId and document order."""
        body = PayloadBuilder.envelope_from_document(
            [ANCHORED_SIGNER, PLAIN_SIGNER],
            [{'path': '/tmp/one.pdf'}, {'path': '/tmp/two.pdf'}],
            email={'subject': 'Please sign', 'body': 'Thanks'},
            status='sent'
        )

        assert body['emailSubject'] == 'Please sign'
        assert body['emailBlurb'] == 'Thanks'
        assert body['status'] == 'sent'
        assert len(body['recipients']['signers']) == 2
        assert body['recipients']['signers'][0]['clientUserId'] is not None
        assert [d['documentId'] for d in body['documents']] == ['1', '2']
        assert 'eventNotification' not in body

    def test_envelope_from_document_with_carbon_copies(self):
        body = PayloadBuilder.envelope_from_document(
            [PLAIN_SIGNER], [{'path': '/tmp/one.pdf'}],
            carbon_copies=[{'name': 'CC', 'email': 'cc@test.com'}]
        )
        assert body['recipients']['carbonCopies'][0]['recipientId'] == '2'

    def test_envelope_from_document_requires_files(self):
        with pytest.raises(ValidationError):
            PayloadBuilder.envelope_from_document([PLAIN_SIGNER], [])

    def test_template_definition(self):
        """Template bodies carry a definition block and template flags."""
        body = PayloadBuilder.template_definition(
            'Listing Agreement', [dict(PLAIN_SIGNER, role_name='Seller')], [{'path': '/tmp/la.pdf'}],
            description='Standard listing agreement'
        )
        assert body['envelopeTemplateDefinition'] == {
            'description': 'Standard listing agreement',
            'name': 'Listing Agreement',
            'pageCount': 1,
            'password': '',
            'shared': False,
        }
        assert body['recipients']['signers'][0]['templateLocked'] is True

    def test_envelope_from_template_requires_id(self):
        with pytest.raises(ValidationError):
            PayloadBuilder.envelope_from_template('', [PLAIN_SIGNER])

    def test_envelope_from_template(self):
        body = PayloadBuilder.envelope_from_template(
            'T-1', [dict(PLAIN_SIGNER, role_name='Seller')], email={'subject': 'Sign'}
        )
        assert body['templateId'] == 'T-1'
        assert body['templateRoles'][0]['roleName'] == 'Seller'
        assert body['eventNotification'] == {}

    def test_recipient_view(self):
        """Client user id defaults to the email."""
        body = PayloadBuilder.recipient_view('Ann', 'ann@test.com', 'https://app.test/done')
        assert body == {
            'authenticationMethod': 'email',
            'clientUserId': 'ann@test.com',
            'email': 'ann@test.com',
            'returnUrl': 'https://app.test/done',
            'userName': 'Ann',
        }


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
