"""
cassettetap Common Utilities

Body and header conversion helpers shared by the recorder, the replayer and
the cassette models.
"""

import json
import os
from typing import Any, Dict, Mapping, Optional, Tuple, Union

# Headers describing the transfer rather than the content. Bodies are stored
# decoded, so replaying these would make the client decode them a second time.
TRANSPORT_HEADERS = {
    'content-length',
    'content-encoding',
    'transfer-encoding',
    'connection',
}

FALSE_VALUES = {'', '0', 'false', 'no', 'off'}


def safe_json_parse(json_string: Union[str, bytes, None], default: Any = None) -> Any:
    """
    Safely parse JSON string with error handling.

    Args:
        json_string: JSON string (or UTF-8 bytes) to parse
        default: Default value to return if parsing fails

    Returns:
        Parsed JSON object, or default if parsing fails

    Example:
        body = safe_json_parse(request.body, default={})
    """
    if not json_string:
        return default

    try:
        return json.loads(json_string)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default


def env_flag(name: str, default: bool = False, environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Read a boolean flag from the environment.

    Any non-empty value other than 0/false/no/off counts as set, so
    ``CI=true`` and ``CI=1`` both enable CI mode.
    """
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in FALSE_VALUES


def decode_body(raw: Union[str, bytes, None]) -> Tuple[Any, bool]:
    """
    Convert a raw HTTP body into the form stored in a cassette.

    JSON objects and arrays are stored parsed, other UTF-8 content is stored
    as text and anything else is stored hex encoded.

    Args:
        raw: Body as sent or received on the wire

    Returns:
        Tuple of (stored value, is_binary). Empty bodies give (None, False).
    """
    if raw is None or len(raw) == 0:
        return None, False

    if isinstance(raw, bytes):
        try:
            text = raw.decode('utf-8')
        except UnicodeDecodeError:
            return raw.hex(), True
    else:
        text = raw

    parsed = safe_json_parse(text)
    if isinstance(parsed, (dict, list)):
        return parsed, False
    return text, False


def encode_body(value: Any, is_binary: bool = False) -> bytes:
    """Inverse of decode_body: produce the bytes to put on the wire."""
    if value is None:
        return b''
    if is_binary:
        return bytes.fromhex(value)
    if isinstance(value, str):
        return value.encode('utf-8')
    return json.dumps(value).encode('utf-8')


def filter_transport_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """
    Drop headers that describe the transfer encoding of a body.

    Args:
        headers: Response headers (any mapping, e.g. requests' CaseInsensitiveDict)

    Returns:
        Plain dict with transport headers removed
    """
    return {k: v for k, v in headers.items() if k.lower() not in TRANSPORT_HEADERS}
