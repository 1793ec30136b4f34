"""
cassettetap Interception Boundary

The single place where cassettetap touches the HTTP stack. Two modes:

- blocking: the ``responses`` mock registry owns ``requests``; only
  registered responders answer, every other request fails with
  ``requests.exceptions.ConnectionError``.
- observing: real network access is allowed and every completed exchange is
  reported to an observer callback.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple
from unittest import mock

import requests
import responses
from requests.adapters import HTTPAdapter

from ..errors import SessionActiveError

logger = logging.getLogger(__name__)

Matcher = Callable[[requests.PreparedRequest], Tuple[bool, str]]
Responder = Callable[[requests.PreparedRequest], Any]
Observer = Callable[[requests.PreparedRequest, requests.Response], None]


class InterceptionBoundary:
    """
    Toggle between blocked and observed network access for ``requests``.

    Example:
        boundary = InterceptionBoundary()
        boundary.block_network()
        boundary.add_responder('GET', 'http://example.com/', respond)
        ...
        boundary.deactivate()
    """

    INERT = 'inert'
    BLOCKING = 'blocking'
    OBSERVING = 'observing'

    def __init__(self):
        self.mode = self.INERT
        self._mock: Optional[responses.RequestsMock] = None
        self._send_patch = None

    @property
    def active(self) -> bool:
        """True while the boundary is blocking or observing."""
        return self.mode != self.INERT

    def _ensure_inert(self):
        if self.active:
            raise SessionActiveError(f"Interception boundary already {self.mode}")

    def block_network(self):
        """Refuse all real network access; only registered responders answer."""
        self._ensure_inert()
        self._mock = responses.RequestsMock(assert_all_requests_are_fired=False)
        self._mock.start()
        self.mode = self.BLOCKING
        logger.debug("Real network access disabled")

    def add_responder(
        self,
        method: str,
        url: str,
        responder: Responder,
        matchers: Optional[List[Matcher]] = None
    ):
        """
        Register a mock responder for a request pattern.

        Args:
            method: HTTP method to match
            url: URL to match, without query string
            responder: Called with the live request; returns
                (status, headers, body) or an exception to raise
            matchers: Extra matchers returning (matched, reason)
        """
        if self.mode != self.BLOCKING:
            raise RuntimeError("Responders can only be added while the network is blocked")

        self._mock.add_callback(
            method,
            url,
            callback=responder,
            content_type=None,
            match=list(matchers or []),
        )

    def allow_network(self, observer: Observer):
        """
        Allow real network access and report each completed exchange.

        Args:
            observer: Called with (request, response) after every live request
        """
        self._ensure_inert()
        real_send = HTTPAdapter.send

        def _observed_send(adapter, request, *args, **kwargs):
            response = real_send(adapter, request, *args, **kwargs)
            observer(request, response)
            return response

        self._send_patch = mock.patch.object(HTTPAdapter, 'send', _observed_send)
        self._send_patch.start()
        self.mode = self.OBSERVING
        logger.debug("Real network access enabled, observing traffic")

    def deactivate(self):
        """Restore ``requests``. Safe to call when already inert."""
        previous, self.mode = self.mode, self.INERT
        mock_registry, self._mock = self._mock, None
        send_patch, self._send_patch = self._send_patch, None

        try:
            if mock_registry is not None:
                mock_registry.stop()
                mock_registry.reset()
        finally:
            if send_patch is not None:
                send_patch.stop()

        if previous != self.INERT:
            logger.debug(f"Interception boundary deactivated (was {previous})")
