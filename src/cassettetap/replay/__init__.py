"""
cassettetap Replay Module

Serving recorded interactions in place of the network.

This module provides:
- Interception boundary over ``requests`` (blocked or observed network)
- One-shot replay of recorded definitions
- Request matching with wildcard-aware body comparison
- JSON-RPC id relaxation and response id echo
"""

from .boundary import InterceptionBoundary
from .replayer import InteractionReplayer, InstalledInteraction
from .matchers import DefinitionMatcher, body_matches
from .jsonrpc import AnyId, relax_definition, echo_request_id

__all__ = [
    'InterceptionBoundary',
    'InteractionReplayer',
    'InstalledInteraction',
    'DefinitionMatcher',
    'body_matches',
    'AnyId',
    'relax_definition',
    'echo_request_id',
]
