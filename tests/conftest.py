"""
Shared fixtures for cassettetap tests.

The live network is simulated by patching ``HTTPAdapter.send`` with a
scripted handler, so recording runs never leave the process.
"""

import json
from unittest.mock import patch

import pytest
import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict

from cassettetap import VCR, VCRConfig

pytest_plugins = ["pytester"]


def make_response(request, status=200, body=b'', headers=None):
    """Build a requests.Response as an adapter would return it."""
    if isinstance(body, str):
        body = body.encode('utf-8')
    elif not isinstance(body, bytes):
        body = json.dumps(body).encode('utf-8')

    response = requests.Response()
    response.status_code = status
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = request.url
    response.request = request
    return response


class FakeNetwork:
    """
    Scripted stand-in for the real network.

    The handler receives the prepared request and returns
    (status, body, headers).
    """

    def __init__(self):
        self.requests = []
        self.handler = lambda request: (200, 'hello', {'Content-Type': 'text/plain'})

    @property
    def calls(self) -> int:
        return len(self.requests)

    def send(self, adapter, request, *args, **kwargs):
        self.requests.append(request)
        status, body, headers = self.handler(request)
        return make_response(request, status, body, headers)


@pytest.fixture
def network():
    """Patch the requests transport with a FakeNetwork."""
    fake = FakeNetwork()

    def _send(adapter, request, *args, **kwargs):
        return fake.send(adapter, request, *args, **kwargs)

    with patch.object(HTTPAdapter, 'send', _send):
        yield fake


def jsonrpc_handler(results):
    """Handler answering JSON-RPC calls with the given results in order, echoing ids."""
    remaining = list(results)

    def handler(request):
        payload = json.loads(request.body)
        body = {'jsonrpc': '2.0', 'id': payload['id'], 'result': remaining.pop(0)}
        return 200, body, {'Content-Type': 'application/json'}

    return handler


@pytest.fixture
def config():
    """Configuration with CI enforcement off, independent of the environment."""
    return VCRConfig(ci=False)


@pytest.fixture
def vcr(config):
    """Session controller; deactivated after the test whatever happened."""
    controller = VCR(config)
    yield controller
    controller.boundary.deactivate()


@pytest.fixture
def test_file(tmp_path):
    """Path of a (nonexistent) test module inside a temporary directory."""
    return tmp_path / "test_api.py"


@pytest.fixture
def cassette_file(tmp_path):
    """Cassette file belonging to test_file."""
    return tmp_path / "__cassettes__" / "test_api.cassette.json"
