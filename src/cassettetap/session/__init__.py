"""
cassettetap Session Module

Begin/end lifecycle of record/replay sessions and its configuration.
"""

from .config import VCRConfig
from .controller import (
    VCR,
    CassetteSession,
    SessionMode,
    begin,
    end,
    use_cassette,
    get_default_vcr,
)

__all__ = [
    'VCRConfig',
    'VCR',
    'CassetteSession',
    'SessionMode',
    'begin',
    'end',
    'use_cassette',
    'get_default_vcr',
]
