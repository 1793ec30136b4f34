"""
cassettetap Cassette Module

Persistence of recorded interactions keyed by test identity.
"""

from .models import InteractionDefinition
from .store import (
    CassetteStore,
    CassetteReadResult,
    ReadStatus,
    cassette_path_for,
)

__all__ = [
    'InteractionDefinition',
    'CassetteStore',
    'CassetteReadResult',
    'ReadStatus',
    'cassette_path_for',
]
