"""
Stream catalog building for tvconvert.

Runs ffprobe on a container and turns its JSON report into typed audio and
subtitle stream records. The "default" disposition reported by the source is
discarded on purpose: the planner decides which output stream is default.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from tvconvert.process import ProcessRunner


class ProbeError(Exception):
    """Raised when ffprobe fails or its output cannot be understood."""


@dataclass(frozen=True)
class Stream:
    """One audio or subtitle stream of a container."""

    index: int
    codec_name: str
    language: Optional[str]
    title: Optional[str]
    dispositions_without_default: Tuple[str, ...]


@dataclass(frozen=True)
class AudioStream(Stream):
    channel_layout: Optional[str] = None


@dataclass(frozen=True)
class SubtitleStream(Stream):
    pass


@dataclass(frozen=True)
class ContainerInfo:
    """Everything the planner needs to know about one input file."""

    duration_seconds: float
    audio_streams: Tuple[AudioStream, ...]
    subtitle_streams: Tuple[SubtitleStream, ...]


def build_probe_cmd(ffprobe_path: Union[str, Path], input_path: Union[str, Path]) -> List[str]:
    """Return the ffprobe command that reports format and streams as JSON."""
    return [
        str(ffprobe_path),
        "-hide_banner",
        "-loglevel",
        "warning",
        "-show_format",
        "-show_streams",
        "-output_format",
        "json",
        str(input_path),
    ]


def dispositions_without_default(disposition_map: Optional[Mapping[str, Any]]) -> Tuple[str, ...]:
    """Return the set flags of a disposition map, in map order, never including "default"."""
    if not disposition_map:
        return ()
    return tuple(key for key, value in disposition_map.items() if key != "default" and value)


def _parse_duration(report: Dict[str, Any]) -> float:
    fmt = report.get("format")
    if not isinstance(fmt, dict) or "duration" not in fmt:
        raise ProbeError("ffprobe output has no format duration")
    raw = fmt["duration"]
    # ffprobe reports numbers as strings ("5025.536000")
    if isinstance(raw, bool):
        raise ProbeError(f"Invalid format duration: {raw!r}")
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ProbeError(f"Invalid format duration: {raw!r}") from e


def _mapping_field(stream: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = stream.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ProbeError(f"Malformed {key} in stream {stream.get('index')!r}: {value!r}")
    return value


def _common_fields(stream: Dict[str, Any]) -> Dict[str, Any]:
    tags = _mapping_field(stream, "tags")
    return {
        "index": stream.get("index"),
        "codec_name": stream.get("codec_name"),
        "language": tags.get("language"),
        "title": tags.get("title"),
        "dispositions_without_default": dispositions_without_default(_mapping_field(stream, "disposition")),
    }


def parse_probe_output(raw: Union[str, bytes]) -> ContainerInfo:
    """
    Parse ffprobe JSON output into a ContainerInfo.

    Audio and subtitle streams keep the order ffprobe reported them in;
    streams of any other type are ignored.

    Raises:
        ProbeError: if the output is not a JSON object, the duration is
            missing or not numeric, or a stream record is malformed.
    """
    try:
        report = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProbeError(f"ffprobe output is not valid JSON: {e}") from e

    if not isinstance(report, dict):
        raise ProbeError("ffprobe output is not a JSON object")

    duration = _parse_duration(report)

    audio: List[AudioStream] = []
    subtitles: List[SubtitleStream] = []
    streams = report.get("streams")
    if streams is None:
        streams = []
    if not isinstance(streams, list):
        raise ProbeError("ffprobe output streams is not an array")

    for stream in streams:
        if not isinstance(stream, dict):
            raise ProbeError(f"ffprobe output has a malformed stream: {stream!r}")
        codec_type = stream.get("codec_type")
        if codec_type == "audio":
            audio.append(AudioStream(channel_layout=stream.get("channel_layout"), **_common_fields(stream)))
        elif codec_type == "subtitle":
            subtitles.append(SubtitleStream(**_common_fields(stream)))

    return ContainerInfo(
        duration_seconds=duration,
        audio_streams=tuple(audio),
        subtitle_streams=tuple(subtitles),
    )


def probe_container(
    ffprobe_path: Union[str, Path],
    input_path: Union[str, Path],
    runner: Optional[ProcessRunner] = None,
) -> ContainerInfo:
    """Run ffprobe on input_path and return its stream catalog."""
    if runner is None:
        runner = ProcessRunner()

    result = runner.capture(build_probe_cmd(ffprobe_path, input_path))
    if result.returncode != 0:
        raise ProbeError(f"ffprobe failed for {input_path} (rc={result.returncode}):\n{result.stderr.strip()}")
    return parse_probe_output(result.stdout)
