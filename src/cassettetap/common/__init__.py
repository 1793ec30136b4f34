"""
cassettetap Common Utilities

Shared helpers used across cassettetap modules.
"""

from .utils import (
    safe_json_parse,
    env_flag,
    decode_body,
    encode_body,
    filter_transport_headers,
)

__all__ = [
    'safe_json_parse',
    'env_flag',
    'decode_body',
    'encode_body',
    'filter_transport_headers',
]
