"""
cassettetap Cassette Models

Data model for one recorded request/response exchange.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class InteractionDefinition:
    """
    One recorded exchange, stored with nock-compatible keys.

    ``body`` is the request body used as match criteria (None matches any
    body). ``response`` is the response body: parsed JSON, text, or hex
    when ``response_is_binary`` is set.
    """

    scope: str
    method: str
    path: str
    status: int = 200
    body: Any = None
    response: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    response_is_binary: bool = False

    @property
    def url(self) -> str:
        """Full URL (scope plus path and query)."""
        return f"{self.scope}{self.path}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InteractionDefinition':
        """Create a definition from its cassette JSON form."""
        headers = data.get('headers')
        if headers is None:
            # nock also writes rawHeaders as a flat [name, value, ...] list
            raw = data.get('rawHeaders') or []
            headers = dict(zip(raw[0::2], raw[1::2]))

        return cls(
            scope=data['scope'],
            method=data.get('method', 'GET').upper(),
            path=data.get('path', '/'),
            status=int(data.get('status', 200)),
            body=data.get('body'),
            response=data.get('response'),
            headers=dict(headers),
            response_is_binary=bool(data.get('responseIsBinary', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            'scope': self.scope,
            'method': self.method,
            'path': self.path,
        }
        if self.body is not None:
            data['body'] = self.body
        data['status'] = self.status
        data['response'] = self.response
        data['headers'] = dict(self.headers)
        if self.response_is_binary:
            data['responseIsBinary'] = True
        return data


def definitions_from_list(items: Optional[List[Dict[str, Any]]]) -> Optional[List[InteractionDefinition]]:
    """Convert a cassette entry to definitions, keeping None (absent) distinct from []."""
    if items is None:
        return None
    return [InteractionDefinition.from_dict(item) for item in items]


def definitions_to_list(definitions: List[InteractionDefinition]) -> List[Dict[str, Any]]:
    """Convert definitions to their cassette JSON form."""
    return [definition.to_dict() for definition in definitions]
