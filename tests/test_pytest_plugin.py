"""
Tests for the pytest plugin.

Runs small test suites with ``pytester`` and checks the cassette files the
``cassette`` fixture leaves behind.
"""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from cassettetap.pytest_plugin import node_identity

CONFTEST = """
pytest_plugins = ["cassettetap.pytest_plugin"]
"""

# Live network stand-in; FAIL_LIVE makes any live call an error
TEST_MODULE = """
import pytest
import requests
from unittest.mock import patch
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict

FAIL_LIVE = {fail_live}


def fake_send(adapter, request, *args, **kwargs):
    if FAIL_LIVE:
        raise AssertionError("live network used")
    response = requests.Response()
    response.status_code = 200
    response._content = b"hello"
    response.headers = CaseInsensitiveDict({{"Content-Type": "text/plain"}})
    response.url = request.url
    response.request = request
    return response


@pytest.fixture(autouse=True)
def live_network():
    with patch.object(HTTPAdapter, "send", fake_send):
        yield


class TestApi:
    def test_fetch(self, cassette):
        assert requests.get("http://example.com").text == "hello"
"""


@pytest.fixture
def suite(pytester, monkeypatch):
    monkeypatch.delenv('CI', raising=False)
    # Inner runs share this process; rebuild the default controller per suite
    monkeypatch.setattr('cassettetap.session.controller._default_vcr', None)
    pytester.makeconftest(CONFTEST)
    return pytester


def cassette_data(pytester):
    path = pytester.path / '__cassettes__' / 'test_api.cassette.json'
    return json.loads(path.read_text(encoding='utf-8'))


class TestNodeIdentity:
    """Test node_identity()."""

    def test_strips_module_path(self):
        node = Mock(nodeid='tests/test_api.py::TestApi::test_fetch[case-1]')

        assert node_identity(node) == 'TestApi::test_fetch[case-1]'

    def test_falls_back_to_name(self):
        node = Mock(nodeid='tests/test_api.py')
        node.name = 'test_api.py'

        assert node_identity(node) == 'test_api.py'


class TestCassetteFixture:
    """Test the cassette fixture end to end."""

    def test_records_then_replays_under_ci(self, suite):
        suite.makepyfile(test_api=TEST_MODULE.format(fail_live=False))

        result = suite.runpytest()
        result.assert_outcomes(passed=1)

        data = cassette_data(suite)
        assert list(data) == ['TestApi::test_fetch']
        assert data['TestApi::test_fetch'][0]['response'] == 'hello'

        suite.makepyfile(test_api=TEST_MODULE.format(fail_live=True))

        result = suite.runpytest('--cassette-ci')
        result.assert_outcomes(passed=1)

    def test_ci_flag_fails_without_cassette(self, suite):
        suite.makepyfile(test_api=TEST_MODULE.format(fail_live=False))

        result = suite.runpytest('--cassette-ci')

        result.assert_outcomes(errors=1)
        result.stdout.fnmatch_lines(['*No cassettes found. They must be in place before running tests on CI*'])

    def test_marker_options(self, suite):
        suite.makepyfile(test_marked="""
            import pytest

            @pytest.mark.cassette(ci=True)
            def test_needs_cassette(cassette):
                pass
        """)

        result = suite.runpytest()

        result.assert_outcomes(errors=1)
        result.stdout.fnmatch_lines(['*MissingFixtureError*'])

    def test_session_yielded(self, suite):
        suite.makepyfile(test_fixture_session="""
            from cassettetap import CassetteSession, SessionMode

            def test_fixture_session(cassette):
                assert isinstance(cassette, CassetteSession)
                assert cassette.mode is SessionMode.RECORD
                assert cassette.identity == 'test_fixture_session'
        """)

        result = suite.runpytest()

        result.assert_outcomes(passed=1)


class TestPackaging:
    """Test the plugin's install requirements."""

    def test_pytest_extra_declared(self):
        tomllib = pytest.importorskip('tomllib')
        pyproject = Path(__file__).resolve().parents[1] / 'pyproject.toml'

        data = tomllib.loads(pyproject.read_text(encoding='utf-8'))

        extra = data['project']['optional-dependencies']['pytest']
        assert any(requirement.startswith('pytest') for requirement in extra)
