"""
Shared fixtures: a fake DocuSign endpoint patched over requests.request,
so tests never touch the network.
"""

import json
import sys
from pathlib import Path
from unittest.mock import patch
from urllib.parse import urlsplit

import pytest
import requests

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from docusign_rest.configuration import reset


ACCOUNT_ID = '123456'

LOGIN_INFORMATION = {
    'loginAccounts': [
        {
            'accountId': ACCOUNT_ID,
            'baseUrl': f'https://demo.docusign.net/restapi/v2/accounts/{ACCOUNT_ID}',
            'email': 'agent@test.com',
            'isDefault': 'true',
            'name': 'Test Account',
            'userId': 'user-guid',
            'userName': 'Test Agent',
        }
    ]
}


def make_response(method, url, headers=None, data=None, params=None,
                  body=None, status=200, reason='OK', content_type='application/json'):
    """Build a real requests.Response with its PreparedRequest attached."""
    prepared = requests.Request(method, url, headers=headers, data=data, params=params).prepare()

    response = requests.Response()
    response.status_code = status
    response.reason = reason
    if body is None:
        response._content = b''
    elif isinstance(body, bytes):
        response._content = body
    else:
        response._content = json.dumps(body).encode('utf-8')
    if content_type:
        response.headers['Content-Type'] = content_type
    response.request = prepared
    response.url = prepared.url
    return response


class FakeDocuSign:
    """
    Stands in for requests.request.

    Routes match on method and URL path suffix; the most recently
    registered route wins. Unrouted requests get an empty JSON object.
    """

    def __init__(self):
        self.calls = []
        self.routes = []

    def respond(self, method, path, body=None, status=200, reason='OK', content_type='application/json'):
        self.routes.append((method.upper(), path, body, status, reason, content_type))

    def calls_to(self, path):
        return [c for c in self.calls if urlsplit(c['url']).path.endswith(path)]

    @property
    def last_call(self):
        return self.calls[-1]

    def __call__(self, method, url, headers=None, data=None, params=None, timeout=None, verify=None):
        self.calls.append({
            'method': method,
            'url': url,
            'headers': headers or {},
            'data': data,
            'params': params,
            'timeout': timeout,
            'verify': verify,
        })

        path = urlsplit(url).path
        for route_method, suffix, body, status, reason, content_type in reversed(self.routes):
            if route_method == method and path.endswith(suffix):
                return make_response(method, url, headers, data, params,
                                     body=body, status=status, reason=reason, content_type=content_type)

        return make_response(method, url, headers, data, params, body={})


@pytest.fixture(autouse=True)
def default_configuration():
    """Every test starts and ends with built-in defaults."""
    reset()
    yield
    reset()


@pytest.fixture
def fake_docusign():
    fake = FakeDocuSign()
    fake.respond('GET', '/login_information', LOGIN_INFORMATION)
    with patch('docusign_rest.transport.requests.request', side_effect=fake):
        yield fake


@pytest.fixture
def pdf_files(tmp_path):
    """Two small PDF-like files on disk."""
    first = tmp_path / 'contract.pdf'
    second = tmp_path / 'addendum.pdf'
    first.write_bytes(b'%PDF-1.4 contract \x00\xff\xfe body')
    second.write_bytes(b'%PDF-1.4 addendum \x89\x00 body')
    return [
        {'path': str(first)},
        {'path': str(second), 'name': 'Addendum A.pdf'},
    ]
