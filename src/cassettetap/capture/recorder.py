"""
cassettetap Interaction Recorder

Captures live requests and responses passing through the interception
boundary, in the order they complete.
"""

import logging
from typing import List
from urllib.parse import urlsplit

import requests

from ..cassette.models import InteractionDefinition
from ..common import decode_body, filter_transport_headers
from ..replay.boundary import InterceptionBoundary

logger = logging.getLogger(__name__)


def definition_from_exchange(
    request: requests.PreparedRequest,
    response: requests.Response
) -> InteractionDefinition:
    """
    Build a cassette definition from one live exchange.

    Args:
        request: Request as sent by the adapter
        response: Response returned by the adapter

    Returns:
        InteractionDefinition describing the exchange
    """
    parts = urlsplit(request.url)
    path = parts.path or '/'
    if parts.query:
        path = f"{path}?{parts.query}"

    if isinstance(request.body, (str, bytes)):
        body, _ = decode_body(request.body)
    else:
        # streamed or file uploads are not captured; the definition matches any body
        body = None

    # Reading content also caches it on the response for the caller
    response_body, is_binary = decode_body(response.content)

    return InteractionDefinition(
        scope=f"{parts.scheme}://{parts.netloc}",
        method=(request.method or 'GET').upper(),
        path=path,
        status=response.status_code,
        body=body,
        response=response_body,
        headers=filter_transport_headers(response.headers),
        response_is_binary=is_binary,
    )


class InteractionRecorder:
    """
    Record live traffic while real network access is allowed.

    Example:
        recorder = InteractionRecorder(boundary)
        recorder.start()
        requests.get('http://example.com')
        definitions = recorder.stop()
    """

    def __init__(self, boundary: InterceptionBoundary):
        self.boundary = boundary
        self.records: List[InteractionDefinition] = []
        self.recording = False

    def start(self):
        """Start capturing all traffic permitted through the boundary."""
        self.records = []
        self.boundary.allow_network(self._capture)
        self.recording = True
        logger.debug("Recording started")

    def _capture(self, request: requests.PreparedRequest, response: requests.Response):
        definition = definition_from_exchange(request, response)
        self.records.append(definition)
        logger.debug(
            f"Recorded ({len(self.records)} total): "
            f"{definition.method} {definition.url} -> {definition.status}"
        )

    def stop(self) -> List[InteractionDefinition]:
        """
        Stop capturing and leave the boundary inert.

        Returns:
            Recorded definitions in completion order; an empty list when no
            call was made
        """
        try:
            self.boundary.deactivate()
        finally:
            self.recording = False

        records, self.records = self.records, []
        logger.debug(f"Recording stopped with {len(records)} interactions")
        return records
