"""
cassettetap JSON-RPC Normalizer

JSON-RPC ids are sequence numbers chosen by the caller, so they differ between
the recording run and any later replay, while callers reject a response whose
id does not equal the id they sent. Two steps keep replays correlated:

1. relax_definition() swaps the recorded request id for a wildcard in the
   match criteria, so the recorded literal never blocks a match.
2. echo_request_id() copies the live request's id into the recorded response
   body for every match, before the response is handed to the caller.

Batch requests (JSON arrays of JSON-RPC objects) are handled element-wise;
response ids are mapped from recorded request ids to live ids by position.
"""

import copy
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from ..cassette.models import InteractionDefinition
from ..common import safe_json_parse


@dataclass(frozen=True)
class AnyId:
    """Wildcard standing in for a recorded id; remembers the recorded value."""

    recorded: Any = None

    def matches(self, value: Any) -> bool:
        """Accept any numeric id, including numeric strings."""
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, float)):
            return True
        return isinstance(value, str) and value.lstrip('-').isdigit()


def recorded_id(value: Any) -> Any:
    """Original id behind a possibly relaxed id."""
    return value.recorded if isinstance(value, AnyId) else value


def is_jsonrpc_message(body: Any) -> bool:
    """Check if a parsed body is a single JSON-RPC message."""
    return isinstance(body, dict) and 'jsonrpc' in body


def is_jsonrpc_body(body: Any) -> bool:
    """Check if a parsed body is a JSON-RPC message or a batch of them."""
    if is_jsonrpc_message(body):
        return True
    return (
        isinstance(body, list)
        and len(body) > 0
        and all(is_jsonrpc_message(item) for item in body)
    )


def _relax_message(message: Dict[str, Any]) -> Dict[str, Any]:
    # Notifications carry no id and stay literal
    if 'id' not in message or isinstance(message['id'], AnyId):
        return message
    return {**message, 'id': AnyId(message['id'])}


def relax_definition(definition: InteractionDefinition) -> InteractionDefinition:
    """
    Relax the request match criteria of a JSON-RPC definition.

    Args:
        definition: Recorded definition

    Returns:
        Copy whose request body id accepts any numeric value, or the
        definition itself when its body is not JSON-RPC
    """
    body = definition.body
    if is_jsonrpc_message(body):
        relaxed = _relax_message(body)
        if relaxed is body:
            return definition
        return replace(definition, body=relaxed)
    if is_jsonrpc_body(body):
        relaxed_items = [_relax_message(item) for item in body]
        if all(new is old for new, old in zip(relaxed_items, body)):
            return definition
        return replace(definition, body=relaxed_items)
    return definition


def echo_request_id(
    request_body: Any,
    response_body: Any,
    recorded_request_body: Optional[Any] = None
) -> Any:
    """
    Rewrite a recorded response so its id equals the live request's id.

    Args:
        request_body: Live request body (raw bytes/str or already parsed)
        response_body: Recorded response body (parsed JSON)
        recorded_request_body: Request body of the definition, needed to
            correlate batch responses

    Returns:
        Response body to send. The input is never mutated; bodies that are
        not JSON-RPC are returned unchanged.
    """
    if isinstance(request_body, (str, bytes)):
        request_body = safe_json_parse(request_body)

    if is_jsonrpc_message(request_body):
        if 'id' not in request_body or not isinstance(response_body, dict):
            return response_body
        echoed = copy.deepcopy(response_body)
        echoed['id'] = request_body['id']
        return echoed

    if is_jsonrpc_body(request_body) and isinstance(response_body, list):
        return _echo_batch(request_body, response_body, recorded_request_body)

    return response_body


def _echo_batch(request_body, response_body, recorded_request_body):
    if not isinstance(recorded_request_body, list):
        return response_body

    id_map = {}
    for recorded, live in zip(recorded_request_body, request_body):
        if not isinstance(recorded, dict) or not isinstance(live, dict):
            continue
        if 'id' in recorded and 'id' in live:
            try:
                id_map[recorded_id(recorded['id'])] = live['id']
            except TypeError:
                # unhashable id
                continue

    echoed = copy.deepcopy(response_body)
    for item in echoed:
        if not isinstance(item, dict) or 'id' not in item:
            continue
        try:
            if item['id'] in id_map:
                item['id'] = id_map[item['id']]
        except TypeError:
            continue
    return echoed
