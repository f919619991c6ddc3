"""Watch configuration for ``spid init``.

The configuration is a JSON object with a single list of paths:

    {"watch_paths": ["/etc", "/usr/local/bin"]}

``WatchFiles`` is accepted in place of ``watch_paths`` for configs written for
earlier releases.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple, Union

from spid.exceptions import ConfigError

LEGACY_WATCH_KEY = "WatchFiles"


@dataclass
class WatchConfig:
    """Typed watch configuration."""
    watch_paths: List[str] = field(default_factory=list)   # Files and directories to watch

    @classmethod
    def from_dict(cls, data: object) -> "WatchConfig":
        """Build a config from parsed JSON.

        Raises:
            ConfigError: If the structure is not an object with a non-empty
                list of path strings.
        """
        if not isinstance(data, dict):
            raise ConfigError("Config must be a JSON object")

        if "watch_paths" in data:
            paths = data["watch_paths"]
        elif LEGACY_WATCH_KEY in data:
            paths = data[LEGACY_WATCH_KEY]
        else:
            raise ConfigError("Config is missing 'watch_paths'")

        if not isinstance(paths, list) or not paths:
            raise ConfigError("'watch_paths' must be a non-empty list")
        for path in paths:
            if not isinstance(path, str) or not path:
                raise ConfigError(f"Invalid watch path: {path!r}")

        return cls(watch_paths=list(paths))

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "WatchConfig":
        """Load a config from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or is malformed.
        """
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {config_path}")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        except ValueError as e:
            raise ConfigError(f"Config file {config_path} is not valid JSON: {e}") from e

        return cls.from_dict(data)


def verify_watch_paths(watch_paths: List[str]) -> List[Tuple[str, bool, str]]:
    """Check that every watch path can be opened for reading.

    Args:
        watch_paths: Paths from the watch configuration.

    Returns:
        One (path, ok, detail) tuple per path, in order. ``detail`` is empty
        on success and holds the failure reason otherwise.
    """
    results: List[Tuple[str, bool, str]] = []

    for path in watch_paths:
        try:
            if os.path.isdir(path):
                os.listdir(path)
            else:
                with open(path, "rb"):
                    pass
        except OSError as e:
            results.append((path, False, e.strerror or str(e)))
        else:
            results.append((path, True, ""))

    return results
