"""
cassettetap Errors

Exception hierarchy raised by the cassette session lifecycle.
"""


class CassetteError(Exception):
    """Base class for all cassettetap errors."""


class MissingFixtureError(CassetteError):
    """Raised when CI enforcement is on and no cassette entry exists for a test."""

    def __init__(self, cassette_path):
        self.cassette_path = str(cassette_path)
        super().__init__(
            f"No cassettes found. They must be in place before running tests on CI {self.cassette_path}"
        )


class CorruptCassetteError(CassetteError):
    """Raised when a cassette file exists but cannot be understood."""

    def __init__(self, cassette_path, reason: str):
        self.cassette_path = str(cassette_path)
        self.reason = reason
        super().__init__(f"Cassette file {self.cassette_path} is malformed: {reason}")


class SessionActiveError(CassetteError):
    """Raised when a session is started while another one is still active."""
