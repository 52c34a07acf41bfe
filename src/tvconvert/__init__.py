"""
tvconvert - Batch remux movies into a TV-friendly MKV layout.

For every configured movie the operator picks an audio track and an optional
subtitle track; tvconvert then drives ffmpeg to write an MKV whose first
audio track is a stereo AAC copy of the chosen one, plus an .srt file with the
chosen subtitle.

Example usage:
    # As a command-line tool
    $ tvconvert --print-config movies.json
    $ tvconvert --config movies.json

    # As a Python module
    from tvconvert import ConversionPlan, build_ffmpeg_cmd, parse_probe_output
"""

__version__ = "1.0.0"
__description__ = "Batch remux movies into a TV-friendly MKV layout"

# Public API exports
from tvconvert.config import ConfigError, RunConfig, Settings, load_settings
from tvconvert.converter import ConversionOutcome, ProgressMonitor, run_conversion
from tvconvert.media import MediaItem
from tvconvert.pipeline import BatchOrchestrator, BatchResult, MovieJob
from tvconvert.planner import ConversionPlan, build_ffmpeg_cmd
from tvconvert.probe import AudioStream, ContainerInfo, ProbeError, SubtitleStream, parse_probe_output

__all__ = [
    "__version__",
    # Config
    "ConfigError",
    "RunConfig",
    "Settings",
    "load_settings",
    # Model
    "MediaItem",
    "AudioStream",
    "SubtitleStream",
    "ContainerInfo",
    "ConversionPlan",
    "ConversionOutcome",
    # Operations
    "parse_probe_output",
    "build_ffmpeg_cmd",
    "ProgressMonitor",
    "run_conversion",
    "MovieJob",
    "BatchOrchestrator",
    "BatchResult",
    "ProbeError",
]
