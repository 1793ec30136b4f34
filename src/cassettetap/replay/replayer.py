"""
cassettetap Interaction Replayer

Installs recorded definitions at the interception boundary so matching live
requests receive the recorded responses.
"""

import logging
from typing import List
from urllib.parse import urlsplit, urlunsplit

import requests

from ..cassette.models import InteractionDefinition
from ..common import encode_body
from .boundary import InterceptionBoundary
from .jsonrpc import echo_request_id
from .matchers import DefinitionMatcher

logger = logging.getLogger(__name__)


class InstalledInteraction:
    """
    One-shot responder for a single definition.

    Answers exactly one matching live request. Once used it stops matching,
    so a repeated call falls through to the next definition or, when none is
    left, is refused by the boundary.
    """

    def __init__(self, definition: InteractionDefinition):
        self.definition = definition
        self.consumed = False
        self._criteria = DefinitionMatcher(definition.path, definition.body)

    @property
    def url(self) -> str:
        """URL registered at the boundary (no query string)."""
        parts = urlsplit(self.definition.url)
        return urlunsplit((parts.scheme, parts.netloc, parts.path or '/', '', ''))

    def matches(self, request: requests.PreparedRequest):
        if self.consumed:
            return False, "recorded interaction already used"
        return self._criteria(request)

    def respond(self, request: requests.PreparedRequest):
        """Build the recorded response for a matched live request."""
        self.consumed = True
        definition = self.definition

        body = definition.response
        if not definition.response_is_binary:
            body = echo_request_id(request.body, body, definition.body)

        logger.debug(f"Replaying {definition.method} {definition.url} -> {definition.status}")
        return (
            definition.status,
            dict(definition.headers),
            encode_body(body, definition.response_is_binary),
        )


class InteractionReplayer:
    """
    Serve recorded interactions instead of the network.

    Example:
        replayer = InteractionReplayer(boundary)
        installed = replayer.install(definitions)
        ...
        boundary.deactivate()
    """

    def __init__(self, boundary: InterceptionBoundary):
        self.boundary = boundary

    def install(self, definitions: List[InteractionDefinition]) -> List[InstalledInteraction]:
        """
        Block the network and register each definition as a one-shot responder.

        Definitions are registered in order, so identical requests consume
        them in recording order.

        Args:
            definitions: Definitions to serve (already relaxed/transformed)

        Returns:
            Installed interactions, in registration order
        """
        installed = [InstalledInteraction(definition) for definition in definitions]

        self.boundary.block_network()
        try:
            for interaction in installed:
                self.boundary.add_responder(
                    interaction.definition.method,
                    interaction.url,
                    interaction.respond,
                    matchers=[interaction.matches],
                )
        except Exception:
            self.boundary.deactivate()
            raise

        logger.debug(f"Installed {len(installed)} recorded interactions")
        return installed
