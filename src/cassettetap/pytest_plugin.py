"""
cassettetap pytest Plugin

Per-test cassettes for pytest. Needs pytest installed (the ``pytest`` extra:
``pip install cassettetap[pytest]``). Enable it from a conftest.py:

    pytest_plugins = ["cassettetap.pytest_plugin"]

Then request the ``cassette`` fixture:

    @pytest.mark.cassette(ci=False)
    def test_fetch(cassette):
        requests.get('http://example.com')

The cassette key is the test's node id without the file part
(``TestApi::test_fetch[param]``); the cassette file sits next to the test
module in ``__cassettes__``.
"""

import pytest

from .session import use_cassette


def pytest_addoption(parser):
    group = parser.getgroup('cassettetap')
    group.addoption(
        '--cassette-ci',
        action='store_true',
        default=False,
        help='Fail tests whose cassettes are missing instead of recording them',
    )


def pytest_configure(config):
    config.addinivalue_line(
        'markers',
        'cassette(ci=None, transform=None): options for the cassette fixture',
    )


def node_identity(node) -> str:
    """Cassette key for a test item: its node id without the module path."""
    nodeid = node.nodeid
    if '::' in nodeid:
        return nodeid.split('::', 1)[1]
    return node.name


@pytest.fixture
def cassette(request):
    """Record or replay the HTTP traffic of the requesting test."""
    marker = request.node.get_closest_marker('cassette')
    options = dict(marker.kwargs) if marker else {}

    if request.config.getoption('cassette_ci'):
        options['ci'] = True

    with use_cassette(node_identity(request.node), request.path, **options) as session:
        yield session
