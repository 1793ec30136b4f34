"""
cassettetap Cassette Store

Reads and writes the cassette file: a JSON object mapping test identities to
ordered lists of recorded interactions.

A missing key means no recording was ever made for that identity. A key mapped
to an empty list means a recording was made and no external call happened.
The store keeps those two states apart and never deletes keys on its own.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .models import InteractionDefinition, definitions_from_list, definitions_to_list

logger = logging.getLogger(__name__)

DEFAULT_CASSETTE_DIR = '__cassettes__'
DEFAULT_CASSETTE_SUFFIX = '.cassette.json'


def cassette_path_for(
    test_path: Union[str, Path],
    dir_name: str = DEFAULT_CASSETTE_DIR,
    suffix: str = DEFAULT_CASSETTE_SUFFIX
) -> Path:
    """
    Derive the cassette file path from a test file path.

    Everything from the first dot of the file name is replaced by the suffix
    and the file goes into a sibling directory:

        tests/test_api.py -> tests/__cassettes__/test_api.cassette.json

    Args:
        test_path: Path of the test module
        dir_name: Name of the sibling cassette directory
        suffix: Suffix replacing the original extension

    Returns:
        Path of the cassette file
    """
    test_path = Path(test_path)
    stem = test_path.name.split('.', 1)[0]
    return test_path.parent / dir_name / f"{stem}{suffix}"


class ReadStatus(Enum):
    """Outcome of reading a cassette file."""

    ABSENT = 'absent'
    LOADED = 'loaded'
    MALFORMED = 'malformed'


@dataclass
class CassetteReadResult:
    """Result of reading a cassette file, distinguishing absent from malformed."""

    status: ReadStatus
    cassettes: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True unless the file exists but could not be understood."""
        return self.status is not ReadStatus.MALFORMED


class CassetteStore:
    """
    Cassette file access for one test module.

    Example:
        store = CassetteStore(cassette_path_for('tests/test_api.py'))
        definitions = store.get('TestApi::test_fetch')
        if definitions is None:
            print("never recorded")
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize cassette store.

        Args:
            path: Path of the cassette JSON file
        """
        self.path = Path(path)

    def read(self) -> CassetteReadResult:
        """
        Read the whole cassette file.

        Returns:
            CassetteReadResult with status ABSENT when no file exists, LOADED
            with the mapping, or MALFORMED with a reason when the file is
            unreadable or not a JSON object of interaction lists.
        """
        if not self.path.exists():
            return CassetteReadResult(ReadStatus.ABSENT)

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            return CassetteReadResult(ReadStatus.MALFORMED, error=str(e))

        if not isinstance(data, dict):
            return CassetteReadResult(
                ReadStatus.MALFORMED,
                error=f"expected a JSON object, got {type(data).__name__}"
            )

        for identity, entry in data.items():
            if not isinstance(entry, list):
                return CassetteReadResult(
                    ReadStatus.MALFORMED,
                    error=f"entry {identity!r} is not a list"
                )
            try:
                definitions_from_list(entry)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                return CassetteReadResult(
                    ReadStatus.MALFORMED,
                    error=f"entry {identity!r} has an invalid interaction: {e!r}"
                )

        return CassetteReadResult(ReadStatus.LOADED, cassettes=data)

    def load(self) -> Dict[str, List[Dict[str, Any]]]:
        """Lenient read: an absent or malformed file is an empty store."""
        result = self.read()
        if result.status is ReadStatus.MALFORMED:
            logger.warning(f"Ignoring malformed cassette file {self.path}: {result.error}")
        return result.cassettes

    def get(self, identity: str) -> Optional[List[InteractionDefinition]]:
        """
        Get the recorded interactions for a test identity.

        Args:
            identity: Test identity used as cassette key

        Returns:
            List of definitions (possibly empty), or None when the identity
            has never been recorded
        """
        return definitions_from_list(self.load().get(identity))

    def put(self, identity: str, definitions: List[InteractionDefinition]) -> bool:
        """
        Store the interactions recorded for a test identity.

        An empty list never replaces an existing non-empty entry: a session
        that made no calls is not evidence that the recording is stale.

        Args:
            identity: Test identity used as cassette key
            definitions: Interactions recorded during the session

        Returns:
            True if the file was written

        Raises:
            OSError: If the cassette file cannot be written
        """
        cassettes = self.load()
        existing = cassettes.get(identity)

        if not definitions and existing:
            logger.info(
                f"Keeping {len(existing)} recorded interactions for {identity!r}: "
                f"session made no calls"
            )
            return False

        cassettes[identity] = definitions_to_list(definitions)
        self._write(cassettes)
        logger.info(f"Saved {len(definitions)} interactions for {identity!r} to {self.path}")
        return True

    def _write(self, cassettes: Dict[str, List[Dict[str, Any]]]):
        """Replace the cassette file in full, pretty-printed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.",
            suffix='.tmp',
            dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(cassettes, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
