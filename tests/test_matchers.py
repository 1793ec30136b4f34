"""
Tests for replay request matching.

Tests structural body comparison with wildcards, query string matching and
the DefinitionMatcher used at the interception boundary.
"""

import re

import pytest
import requests

from cassettetap.replay.jsonrpc import AnyId
from cassettetap.replay.matchers import DefinitionMatcher, body_matches, query_matches


def prepare(method='POST', url='http://example.com/rpc', data=None, json=None):
    return requests.Request(method, url, data=data, json=json).prepare()


class TestBodyMatches:
    """Test body_matches()."""

    def test_equal_structures(self):
        assert body_matches({'a': [1, {'b': 2}]}, {'a': [1, {'b': 2}]})

    def test_extra_key_fails(self):
        assert not body_matches({'a': 1}, {'a': 1, 'b': 2})

    def test_missing_key_fails(self):
        assert not body_matches({'a': 1, 'b': 2}, {'a': 1})

    def test_list_length_must_match(self):
        assert not body_matches([1, 2], [1, 2, 3])

    def test_any_id_wildcard(self):
        expected = {'jsonrpc': '2.0', 'id': AnyId(41), 'method': 'm'}

        assert body_matches(expected, {'jsonrpc': '2.0', 'id': 7, 'method': 'm'})
        assert not body_matches(expected, {'jsonrpc': '2.0', 'id': 7, 'method': 'other'})
        assert not body_matches(expected, {'jsonrpc': '2.0', 'id': 'abc', 'method': 'm'})

    def test_regex_wildcard(self):
        expected = {'token': re.compile(r'[a-f0-9]{8}')}

        assert body_matches(expected, {'token': 'deadbeef'})
        assert not body_matches(expected, {'token': 'nothex!!'})
        assert not body_matches(expected, {'token': None})


class TestQueryMatches:
    """Test query_matches()."""

    def test_order_insensitive(self):
        assert query_matches('/search?a=1&b=2', 'http://example.com/search?b=2&a=1')

    def test_different_values(self):
        assert not query_matches('/search?a=1', 'http://example.com/search?a=2')

    def test_no_query_on_either_side(self):
        assert query_matches('/search', 'http://example.com/search')

    def test_extra_parameter_fails(self):
        assert not query_matches('/search', 'http://example.com/search?a=1')


class TestDefinitionMatcher:
    """Test DefinitionMatcher."""

    def test_no_body_criteria_matches_any_body(self):
        matched, _ = DefinitionMatcher('/rpc')(prepare(data='anything'))

        assert matched

    def test_json_body(self):
        matcher = DefinitionMatcher('/rpc', {'jsonrpc': '2.0', 'id': AnyId(1), 'method': 'm'})

        matched, _ = matcher(prepare(json={'jsonrpc': '2.0', 'id': 99, 'method': 'm'}))

        assert matched

    def test_json_body_mismatch_has_reason(self):
        matcher = DefinitionMatcher('/rpc', {'method': 'm'})

        matched, reason = matcher(prepare(json={'method': 'x'}))

        assert not matched
        assert 'does not match' in reason

    def test_json_criteria_against_empty_body(self):
        matched, _ = DefinitionMatcher('/rpc', {'method': 'm'})(prepare(method='GET'))

        assert not matched

    def test_text_body(self):
        matcher = DefinitionMatcher('/form', 'a=1&b=2')

        assert matcher(prepare(url='http://example.com/form', data='a=1&b=2'))[0]
        assert not matcher(prepare(url='http://example.com/form', data='a=1'))[0]

    def test_query_string_checked(self):
        matcher = DefinitionMatcher('/items?page=2')

        assert matcher(prepare(method='GET', url='http://example.com/items?page=2'))[0]
        assert not matcher(prepare(method='GET', url='http://example.com/items?page=3'))[0]
