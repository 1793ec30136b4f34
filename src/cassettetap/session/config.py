"""
cassettetap Session Configuration

Configuration for the cassette session controller, read from the environment
or a YAML file.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ..cassette.store import DEFAULT_CASSETTE_DIR, DEFAULT_CASSETTE_SUFFIX, cassette_path_for
from ..common import env_flag

LOGGER_NAME = 'cassettetap'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _check_log_level(level: str, source: str) -> str:
    if str(level).upper() not in LOG_LEVELS:
        raise ValueError(f"Invalid log level {level!r} in {source}, expected one of {', '.join(LOG_LEVELS)}")
    return level


@dataclass
class VCRConfig:
    """Configuration for record/replay sessions."""

    # Enforce cassette presence and forbid live calls
    ci: bool = False

    # Cassette location, relative to the test module
    cassette_dir_name: str = DEFAULT_CASSETTE_DIR
    cassette_suffix: str = DEFAULT_CASSETTE_SUFFIX

    # Raise CorruptCassetteError on malformed cassette files instead of
    # treating them as empty
    strict_cassette_file: bool = False

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'VCRConfig':
        """
        Build configuration from environment variables.

        Recognized variables:
            CI                     - any truthy value enables CI enforcement
            CASSETTETAP_DIR_NAME   - cassette directory name
            CASSETTETAP_STRICT     - true to reject malformed cassette files
            CASSETTETAP_LOG_LEVEL  - log level for the cassettetap loggers
        """
        environ = os.environ if environ is None else environ
        return cls(
            ci=env_flag('CI', False, environ),
            cassette_dir_name=environ.get('CASSETTETAP_DIR_NAME', DEFAULT_CASSETTE_DIR),
            strict_cassette_file=env_flag('CASSETTETAP_STRICT', False, environ),
            log_level=_check_log_level(environ.get('CASSETTETAP_LOG_LEVEL', 'WARNING'), 'CASSETTETAP_LOG_LEVEL'),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> 'VCRConfig':
        """
        Create configuration from a dictionary.

        Keys left out fall back to the environment, then to the defaults.
        Unknown keys raise ValueError.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown cassettetap configuration keys: {sorted(unknown)}")

        base = cls.from_env(environ)
        values = {name: getattr(base, name) for name in known}
        values.update(data)
        _check_log_level(values['log_level'], 'log_level')
        return cls(**values)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path], environ: Optional[Mapping[str, str]] = None) -> 'VCRConfig':
        """Load configuration from a YAML file (a mapping of field names)."""
        with open(yaml_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {yaml_path}, got {type(data).__name__}")

        return cls.from_dict(data, environ)

    def cassette_path(self, test_path: Union[str, Path]) -> Path:
        """Cassette file path for a test module."""
        return cassette_path_for(test_path, self.cassette_dir_name, self.cassette_suffix)

    def configure_logging(self):
        """Apply log_level to the cassettetap loggers."""
        level = _check_log_level(self.log_level, 'log_level').upper()
        logging.getLogger(LOGGER_NAME).setLevel(getattr(logging, level))
