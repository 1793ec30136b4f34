"""
cassettetap Request Matchers

Match criteria for replayed definitions, in the ``responses`` matcher
convention: a callable taking the live request and returning
``(matched, reason)``.

Body criteria may contain wildcards: an AnyId (relaxed JSON-RPC id) or a
compiled regular expression, which must fully match the live value's string
form.
"""

import re
from typing import Any, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import requests

from ..common import safe_json_parse
from .jsonrpc import AnyId

MISSING = object()


def body_matches(expected: Any, actual: Any) -> bool:
    """
    Structurally compare a body criterion against a parsed live body.

    Args:
        expected: Criterion from the definition (may contain wildcards)
        actual: Parsed live body

    Returns:
        True if every part of the live body satisfies the criterion
    """
    if isinstance(expected, AnyId):
        return expected.matches(actual)

    if isinstance(expected, re.Pattern):
        if actual is MISSING or actual is None or isinstance(actual, (dict, list)):
            return False
        return expected.fullmatch(str(actual)) is not None

    if isinstance(expected, dict):
        if not isinstance(actual, dict) or set(expected) != set(actual):
            return False
        return all(body_matches(value, actual[key]) for key, value in expected.items())

    if isinstance(expected, list):
        if not isinstance(actual, list) or len(expected) != len(actual):
            return False
        return all(body_matches(e, a) for e, a in zip(expected, actual))

    return expected == actual


def _body_text(body: Any) -> Optional[str]:
    if body is None:
        return ''
    if isinstance(body, bytes):
        try:
            return body.decode('utf-8')
        except UnicodeDecodeError:
            return None
    if isinstance(body, str):
        return body
    # streamed uploads cannot be inspected without consuming them
    return None


def query_matches(expected_path: str, actual_url: str) -> bool:
    """Compare query strings as parameter multisets, ignoring order."""
    expected = parse_qs(urlsplit(expected_path).query, keep_blank_values=True)
    actual = parse_qs(urlsplit(actual_url).query, keep_blank_values=True)
    return {k: sorted(v) for k, v in expected.items()} == {k: sorted(v) for k, v in actual.items()}


class DefinitionMatcher:
    """
    Match live requests against one definition's query and body criteria.

    Method and URL are matched by the boundary itself.
    """

    def __init__(self, path: str, body: Any = None):
        self.path = path
        self.body = body

    def __call__(self, request: requests.PreparedRequest) -> Tuple[bool, str]:
        if not query_matches(self.path, request.url):
            return False, f"query string of {request.url} does not match {self.path}"

        if self.body is None:
            return True, ''

        text = _body_text(request.body)
        if text is None:
            return False, "request body cannot be compared"

        if isinstance(self.body, (dict, list)):
            parsed = safe_json_parse(text, default=MISSING)
            if body_matches(self.body, parsed):
                return True, ''
            return False, f"request body {text!r} does not match recorded JSON body"

        if body_matches(self.body, text):
            return True, ''
        return False, f"request body {text!r} does not match recorded body"
