"""
cassettetap Session Controller

Begins and ends record/replay sessions. For the current test identity the
cassette entry decides the mode:

    entry state          ci=False             ci=True
    absent               record               MissingFixtureError
    present, empty       record               network blocked
    present, non-empty   replay               replay

Recorded traffic is persisted when the session ends. The boundary is always
deactivated on end, even when persistence fails.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from ..capture.recorder import InteractionRecorder
from ..cassette.models import InteractionDefinition, definitions_from_list
from ..cassette.store import CassetteStore
from ..errors import CassetteError, CorruptCassetteError, MissingFixtureError, SessionActiveError
from ..replay.boundary import InterceptionBoundary
from ..replay.jsonrpc import relax_definition
from ..replay.replayer import InstalledInteraction, InteractionReplayer
from .config import VCRConfig

logger = logging.getLogger(__name__)

Transform = Callable[[List[InteractionDefinition]], List[InteractionDefinition]]


class SessionMode(Enum):
    """How a session treats outbound requests."""

    RECORD = 'record'
    REPLAY = 'replay'
    VERIFIED_EMPTY = 'verified_empty'


@dataclass
class CassetteSession:
    """State of one begin/end pair, returned by begin() and passed to end()."""

    identity: str
    cassette_path: Path
    mode: SessionMode
    ci: bool
    store: CassetteStore
    installed: List[InstalledInteraction] = field(default_factory=list)
    recorder: Optional[InteractionRecorder] = None
    ended: bool = False

    @property
    def definitions(self) -> List[InteractionDefinition]:
        """Definitions installed for replay, after relaxation and transform."""
        return [interaction.definition for interaction in self.installed]

    def pending(self) -> List[InteractionDefinition]:
        """Installed definitions that no live request has used yet."""
        return [i.definition for i in self.installed if not i.consumed]

    @property
    def is_done(self) -> bool:
        """True when every installed definition has been used."""
        return not self.pending()


def _identity(definitions: List[InteractionDefinition]) -> List[InteractionDefinition]:
    return definitions


class VCR:
    """
    Record/replay session controller.

    Example:
        vcr = VCR(VCRConfig.from_env())
        with vcr.use_cassette('TestApi::test_fetch', __file__):
            requests.get('http://example.com')
    """

    def __init__(
        self,
        config: Optional[VCRConfig] = None,
        boundary: Optional[InterceptionBoundary] = None
    ):
        self.config = config or VCRConfig.from_env()
        self.boundary = boundary or InterceptionBoundary()
        self.active_session: Optional[CassetteSession] = None
        self.config.configure_logging()

    def begin(
        self,
        identity: str,
        test_path: Union[str, Path],
        ci: Optional[bool] = None,
        transform: Optional[Transform] = None
    ) -> CassetteSession:
        """
        Start a session for a test.

        Args:
            identity: Test identity used as cassette key
            test_path: Path of the test module; locates the cassette file
            ci: Enforce cassette presence; defaults to config.ci
            transform: Post-processes definitions before they are installed

        Returns:
            The active CassetteSession

        Raises:
            SessionActiveError: If another session is still active
            MissingFixtureError: If ci is on and the identity has no entry
            CorruptCassetteError: If the cassette file is malformed and
                config.strict_cassette_file is set
        """
        if self.active_session is not None or self.boundary.active:
            raise SessionActiveError(
                f"Cannot begin {identity!r}: session "
                f"{getattr(self.active_session, 'identity', None)!r} is still active"
            )

        ci = self.config.ci if ci is None else ci
        transform = transform or _identity
        cassette_path = self.config.cassette_path(test_path)
        store = CassetteStore(cassette_path)

        result = store.read()
        if not result.ok:
            if self.config.strict_cassette_file:
                raise CorruptCassetteError(cassette_path, result.error)
            logger.warning(f"Treating malformed cassette file {cassette_path} as empty: {result.error}")

        entry = definitions_from_list(result.cassettes.get(identity))

        if entry is None and ci:
            raise MissingFixtureError(cassette_path)

        if not entry and not ci:
            # An empty entry re-records; zero calls leave it as []
            session = CassetteSession(identity, cassette_path, SessionMode.RECORD, ci, store)
            session.recorder = InteractionRecorder(self.boundary)
            session.recorder.start()
            logger.info(f"No recorded calls for {identity!r}, recording live traffic")

        elif not entry:
            session = CassetteSession(identity, cassette_path, SessionMode.VERIFIED_EMPTY, ci, store)
            self.boundary.block_network()
            logger.info(f"Cassette for {identity!r} recorded no calls, network blocked")

        else:
            definitions = transform([relax_definition(d) for d in entry])
            session = CassetteSession(identity, cassette_path, SessionMode.REPLAY, ci, store)
            session.installed = InteractionReplayer(self.boundary).install(definitions)
            logger.info(f"Replaying {len(definitions)} recorded interactions for {identity!r}")

        self.active_session = session
        return session

    def end(self, session: CassetteSession) -> List[InteractionDefinition]:
        """
        End a session, persisting recorded traffic.

        Args:
            session: Session returned by begin()

        Returns:
            Interactions recorded during the session (empty unless recording)

        Raises:
            CassetteError: If the session is not the active one
            OSError: If the cassette file cannot be written
        """
        if session is not self.active_session or session.ended:
            raise CassetteError(f"Session {session.identity!r} is not active")

        try:
            recorded = session.recorder.stop() if session.recorder else []
            if session.mode is SessionMode.RECORD:
                session.store.put(session.identity, recorded)
            return recorded
        finally:
            self.boundary.deactivate()
            session.ended = True
            self.active_session = None

    @contextmanager
    def use_cassette(
        self,
        identity: str,
        test_path: Union[str, Path],
        ci: Optional[bool] = None,
        transform: Optional[Transform] = None
    ) -> Iterator[CassetteSession]:
        """Run a block inside a session; the session ends on every exit path."""
        session = self.begin(identity, test_path, ci=ci, transform=transform)
        try:
            yield session
        finally:
            self.end(session)


_default_vcr: Optional[VCR] = None


def get_default_vcr() -> VCR:
    """Process-wide controller configured from the environment."""
    global _default_vcr
    if _default_vcr is None:
        _default_vcr = VCR()
    return _default_vcr


def begin(
    identity: str,
    test_path: Union[str, Path],
    ci: Optional[bool] = None,
    transform: Optional[Transform] = None
) -> CassetteSession:
    """Begin a session on the default controller."""
    return get_default_vcr().begin(identity, test_path, ci=ci, transform=transform)


def end(session: CassetteSession) -> List[InteractionDefinition]:
    """End a session on the default controller."""
    return get_default_vcr().end(session)


def use_cassette(
    identity: str,
    test_path: Union[str, Path],
    ci: Optional[bool] = None,
    transform: Optional[Transform] = None
):
    """Context manager pairing begin/end on the default controller."""
    return get_default_vcr().use_cassette(identity, test_path, ci=ci, transform=transform)
