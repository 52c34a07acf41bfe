"""
Configuration management for tvconvert.

Handles:
- The JSON run configuration (tool paths, output folder, movie list)
- The example run configuration written by --print-config
- Optional user settings from an XDG TOML file
- Automatic script mode detection
"""

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from tvconvert.media import MediaItem

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # pip install tomli


class ConfigError(Exception):
    """Raised when the run configuration is unusable."""


# -------------------- SCRIPT MODE DETECTION --------------------


def is_script_mode() -> bool:
    """
    Detect if styled output should be disabled.

    Returns True if:
    - stdout is not a TTY (piped or redirected)
    - NO_COLOR environment variable is set
    - TVCONVERT_SCRIPT_MODE environment variable is set
    """
    try:
        if not sys.stdout.isatty():
            return True
    except (AttributeError, ValueError):
        return True

    if os.getenv("NO_COLOR") or os.getenv("TVCONVERT_SCRIPT_MODE"):
        return True

    return False


# -------------------- XDG DIRECTORIES --------------------


def get_xdg_config_home() -> Path:
    """Get XDG config home directory."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def get_settings_path() -> Path:
    """Return the user settings file location (it may not exist)."""
    return get_xdg_config_home() / "tvconvert" / "config.toml"


# -------------------- USER SETTINGS --------------------


@dataclass
class Settings:
    """Operator preferences that are not part of a run configuration."""

    # UI settings
    progress: bool = True
    debug: bool = False

    # Notifications
    notify: bool = True
    notify_on_success: bool = True
    notify_on_failure: bool = True

    def apply_script_mode(self) -> None:
        """
        Disable styled output and notifications in script mode.

        Progress lines are still printed; only the rich styling is dropped.
        """
        if is_script_mode():
            self.progress = False
            self.notify = False


_SETTINGS_MAPPINGS: Dict[Tuple[str, str], str] = {
    ("ui", "progress"): "progress",
    ("ui", "debug"): "debug",
    ("notifications", "enabled"): "notify",
    ("notifications", "on_success"): "notify_on_success",
    ("notifications", "on_failure"): "notify_on_failure",
}


def apply_settings_file(file_config: Dict[str, Any], settings: Settings) -> None:
    """Copy recognised [section] keys from a parsed settings file onto settings."""
    for (section, key), attr_name in _SETTINGS_MAPPINGS.items():
        values = file_config.get(section)
        if isinstance(values, dict) and key in values:
            setattr(settings, attr_name, bool(values[key]))


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load user settings, falling back to defaults.

    The file is optional and never created. A file that cannot be parsed
    produces a warning on stderr and the defaults are used.
    """
    if path is None:
        path = get_settings_path()

    settings = Settings()
    if not path.exists():
        return settings

    try:
        with path.open("rb") as f:
            file_config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Warning: Failed to load {path}: {e}", file=sys.stderr)
        return settings

    apply_settings_file(file_config, settings)
    return settings


# -------------------- RUN CONFIGURATION --------------------


EXAMPLE_CONFIG: Dict[str, Any] = {
    "ffmpegBinaryPath": "/usr/local/bin/ffmpeg",
    "ffprobeBinaryPath": "/usr/local/bin/ffprobe",
    "outputFolderPath": "./converted",
    "movies": [
        {
            "title": "The Matrix",
            "year": 1999,
            "inputFilePath": "./downloaded/The Matrix (1999)/The Matrix (1999).mkv",
        },
    ],
}


def write_config_skeleton(path: Path) -> Path:
    """Write the example run configuration to path."""
    path.write_text(json.dumps(EXAMPLE_CONFIG, indent=2) + "\n", encoding="utf-8")
    return path


def _existing_path(data: Dict[str, Any], key: str, directory: bool = False) -> Path:
    value = data.get(key)
    if not isinstance(value, str) or not Path(value).exists():
        raise ConfigError(f"config.{key} does not exist")
    if directory and not Path(value).is_dir():
        raise ConfigError(f"config.{key} is not a directory")
    return Path(value)


@dataclass(frozen=True)
class RunConfig:
    """A validated run configuration."""

    ffmpeg_binary_path: Path
    ffprobe_binary_path: Path
    output_folder_path: Path
    movies: Tuple[MediaItem, ...] = field(default_factory=tuple)

    @classmethod
    def from_file(cls, path: Path) -> "RunConfig":
        """Read and validate a JSON run configuration file."""
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        return cls.parse(text)

    @classmethod
    def parse(cls, text: str) -> "RunConfig":
        """
        Validate a JSON run configuration.

        Every movie problem of one kind is reported in a single message so the
        operator can fix the whole file in one pass.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"config is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError("config must be a JSON object")

        ffmpeg = _existing_path(data, "ffmpegBinaryPath")
        ffprobe = _existing_path(data, "ffprobeBinaryPath")
        output = _existing_path(data, "outputFolderPath", directory=True)

        raw_movies = data.get("movies")
        if not isinstance(raw_movies, list):
            raise ConfigError("config.movies is not an array")

        malformed = [str(m) for m in raw_movies if not isinstance(m, dict)]
        if malformed:
            raise ConfigError("The following movie entries are not objects:\n" + "\n".join(malformed))

        movies = [MediaItem.from_dict(m) for m in raw_movies]

        bad_paths = [m for m in movies if not m.has_valid_input_file_path()]
        if bad_paths:
            raise ConfigError(
                "The following input files do not exist:\n" + "\n".join(str(m.input_file_path) for m in bad_paths)
            )

        bad_titles = [m for m in movies if not m.has_valid_title()]
        if bad_titles:
            raise ConfigError(
                "The following movie titles are invalid:\n" + "\n".join(repr(m.title) for m in bad_titles)
            )

        bad_years = [m for m in movies if not m.has_valid_year()]
        if bad_years:
            raise ConfigError(
                "The following movies' years are invalid:\n" + "\n".join(f"{m.title}: {m.year!r}" for m in bad_years)
            )

        return cls(
            ffmpeg_binary_path=ffmpeg,
            ffprobe_binary_path=ffprobe,
            output_folder_path=output,
            movies=tuple(movies),
        )
