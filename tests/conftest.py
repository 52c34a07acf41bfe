"""
Pytest configuration and shared fixtures for tvconvert tests.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tvconvert.process import CompletedRun  # noqa: E402

MATRIX_PROBE: Dict[str, Any] = {
    "format": {"filename": "The Matrix (1999).mkv", "duration": "8160.000000"},
    "streams": [
        {
            "index": 0,
            "codec_type": "video",
            "codec_name": "h264",
            "disposition": {"default": 1, "attached_pic": 0},
        },
        {
            "index": 1,
            "codec_type": "audio",
            "codec_name": "aac",
            "channel_layout": "5.1",
            "disposition": {"default": 1, "dub": 0, "forced": 0},
            "tags": {"language": "eng"},
        },
        {
            "index": 2,
            "codec_type": "subtitle",
            "codec_name": "subrip",
            "disposition": {"default": 0, "forced": 0},
            "tags": {"language": "eng"},
        },
    ],
}

MULTI_TRACK_PROBE: Dict[str, Any] = {
    "format": {"duration": "100.0"},
    "streams": [
        {"index": 0, "codec_type": "video", "codec_name": "hevc", "disposition": {"default": 1}},
        {
            "index": 1,
            "codec_type": "audio",
            "codec_name": "dts",
            "channel_layout": "5.1(side)",
            "disposition": {"default": 1, "original": 1},
            "tags": {"language": "eng", "title": "DTS-HD MA"},
        },
        {
            "index": 2,
            "codec_type": "audio",
            "codec_name": "ac3",
            "channel_layout": "stereo",
            "disposition": {"default": 0, "comment": 1},
            "tags": {"language": "ger"},
        },
        {
            "index": 3,
            "codec_type": "audio",
            "codec_name": "aac",
            "channel_layout": "mono",
            "disposition": {"default": 0},
        },
        {
            "index": 4,
            "codec_type": "subtitle",
            "codec_name": "hdmv_pgs_subtitle",
            "disposition": {"default": 1},
            "tags": {"language": "eng"},
        },
        {
            "index": 5,
            "codec_type": "subtitle",
            "codec_name": "subrip",
            "disposition": {"default": 0, "forced": 1, "hearing_impaired": 1},
            "tags": {"language": "ger", "title": "Forced"},
        },
        {"index": 6, "codec_type": "attachment", "codec_name": "ttf"},
    ],
}


class FakeRunner:
    """Stands in for ProcessRunner: returns canned ffprobe JSON and ffmpeg output."""

    def __init__(
        self,
        probe_output: Any = MATRIX_PROBE,
        ffmpeg_lines: Iterable[str] = (),
        ffmpeg_stderr: str = "",
        ffmpeg_returncode: int = 0,
        probe_returncode: int = 0,
    ):
        self.probe_output = probe_output
        self.ffmpeg_lines = list(ffmpeg_lines)
        self.ffmpeg_stderr = ffmpeg_stderr
        self.ffmpeg_returncode = ffmpeg_returncode
        self.probe_returncode = probe_returncode
        self.captured: List[List[str]] = []
        self.streamed: List[List[str]] = []

    def capture(self, cmd):
        self.captured.append(list(cmd))
        output = self.probe_output
        if not isinstance(output, str):
            output = json.dumps(output)
        return CompletedRun(self.probe_returncode, output, "probe failed" if self.probe_returncode else "")

    def stream(self, cmd, on_stdout_line):
        self.streamed.append(list(cmd))
        for line in self.ffmpeg_lines:
            on_stdout_line(line)
        return CompletedRun(self.ffmpeg_returncode, "", self.ffmpeg_stderr)


class ScriptedPrompt:
    """Answers prompts from a fixed list and remembers the questions."""

    def __init__(self, answers: Iterable[str]):
        self.answers = list(answers)
        self.questions: List[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        if not self.answers:
            raise EOFError("no more scripted answers")
        return self.answers.pop(0)


class RecordingUI:
    """Collects everything the orchestrator would show."""

    def __init__(self):
        self.collected: List[str] = []
        self.audio_tables: List[list] = []
        self.subtitle_tables: List[list] = []
        self.commands: List[List[str]] = []
        self.progress_lines: List[tuple] = []
        self.failures: List[tuple] = []
        self.errors: List[str] = []
        self.summaries: List[tuple] = []

    def collecting(self, name):
        self.collected.append(name)

    def show_audio_streams(self, streams):
        self.audio_tables.append(list(streams))

    def show_subtitle_streams(self, streams):
        self.subtitle_tables.append(list(streams))

    def show_command(self, cmd):
        self.commands.append(list(cmd))

    def progress(self, current, total, name, percent, speed):
        self.progress_lines.append((current, total, name, percent, speed))

    def conversion_failed(self, name, stderr):
        self.failures.append((name, stderr))

    def error(self, msg):
        self.errors.append(msg)

    def summary(self, succeeded, failed, elapsed):
        self.summaries.append((succeeded, failed))


def progress_block(out_time_us: str, speed: str, state: str = "continue") -> List[str]:
    """Return the lines of one ffmpeg -progress block."""
    return [
        "frame=100",
        "fps=25.00",
        "bitrate=1000.0kbits/s",
        f"out_time_us={out_time_us}",
        "out_time=00:00:04.000000",
        f"speed={speed}",
        f"progress={state}",
    ]


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Directory for test outputs."""
    return tmp_path


@pytest.fixture
def mock_xdg_dirs(tmp_path: Path, monkeypatch):
    """Point XDG directories at temporary paths."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    """An existing (empty) input container."""
    path = tmp_path / "downloaded" / "The Matrix (1999).mkv"
    path.parent.mkdir(parents=True)
    path.touch()
    return path


@pytest.fixture
def matrix(input_file: Path):
    from tvconvert.media import MediaItem

    return MediaItem(title="The Matrix", year=1999, input_file_path=input_file)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "converted"
    path.mkdir()
    return path


@pytest.fixture
def matrix_info():
    from tvconvert.probe import parse_probe_output

    return parse_probe_output(json.dumps(MATRIX_PROBE))


@pytest.fixture
def multi_info():
    from tvconvert.probe import parse_probe_output

    return parse_probe_output(json.dumps(MULTI_TRACK_PROBE))


@pytest.fixture
def tools(tmp_path: Path) -> Dict[str, Path]:
    """Existing stand-ins for the ffmpeg and ffprobe binaries."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    ffmpeg = bin_dir / "ffmpeg"
    ffprobe = bin_dir / "ffprobe"
    ffmpeg.touch()
    ffprobe.touch()
    return {"ffmpeg": ffmpeg, "ffprobe": ffprobe}


@pytest.fixture
def write_run_config(tmp_path: Path, tools, output_dir):
    """Write a run configuration for the given movies and return its path."""

    def _write(movies: List[Dict[str, Any]], extra: Optional[Dict[str, Any]] = None) -> Path:
        data: Dict[str, Any] = {
            "ffmpegBinaryPath": str(tools["ffmpeg"]),
            "ffprobeBinaryPath": str(tools["ffprobe"]),
            "outputFolderPath": str(output_dir),
            "movies": movies,
        }
        if extra:
            data.update(extra)
        path = tmp_path / "movies.json"
        path.write_text(json.dumps(data))
        return path

    return _write
