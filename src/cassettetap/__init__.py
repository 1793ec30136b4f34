"""
cassettetap

Record HTTP interactions on the first test run and replay them afterwards.

This package provides:
- Cassette files keyed by test identity
- Record/replay/fail policy with CI enforcement
- One-shot replay of recorded interactions through ``responses``
- JSON-RPC id correlation across record and replay
- A pytest fixture for per-test cassettes
"""

from .cassette import InteractionDefinition, CassetteStore, cassette_path_for
from .errors import CassetteError, MissingFixtureError, CorruptCassetteError, SessionActiveError
from .session import VCR, VCRConfig, CassetteSession, SessionMode, begin, end, use_cassette

__all__ = [
    'InteractionDefinition',
    'CassetteStore',
    'cassette_path_for',
    'CassetteError',
    'MissingFixtureError',
    'CorruptCassetteError',
    'SessionActiveError',
    'VCR',
    'VCRConfig',
    'CassetteSession',
    'SessionMode',
    'begin',
    'end',
    'use_cassette',
]

__version__ = '1.0.0'
