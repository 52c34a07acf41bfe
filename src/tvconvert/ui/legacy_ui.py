"""
Plain text output for tvconvert.

Used in script mode (piped output, NO_COLOR, TVCONVERT_SCRIPT_MODE) or when
styled progress is disabled in the settings file.
"""

import shlex
import sys
from typing import List, Sequence

from tvconvert.probe import AudioStream, SubtitleStream


def fmt_hms(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    if seconds < 0:
        seconds = 0
    s = int(round(seconds))
    h = s // 3600
    m = (s % 3600) // 60
    r = s % 60
    return f"{h:02d}:{m:02d}:{r:02d}"


def format_progress_line(current: int, total: int, name: str, percent: str, speed: str) -> str:
    """Return the progress line printed while a movie is being converted."""
    return f"[{current} / {total}] {name} [{percent}% at {speed}]"


def audio_rows(streams: Sequence[AudioStream]) -> List[List[str]]:
    return [
        [str(s.index), s.language or "", s.codec_name or "", s.channel_layout or "", s.title or ""] for s in streams
    ]


def subtitle_rows(streams: Sequence[SubtitleStream]) -> List[List[str]]:
    return [[str(s.index), s.language or "", s.codec_name or "", s.title or ""] for s in streams]


AUDIO_HEADERS = ["Index", "Language", "Codec", "Channel layout", "Title"]
SUBTITLE_HEADERS = ["Index", "Language", "Codec", "Title"]


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render rows as a fixed-width text table."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def fmt(cells: Sequence[str]) -> str:
        return " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    lines = [fmt(headers), "-+-".join("-" * w for w in widths)]
    lines.extend(fmt(row) for row in rows)
    return "\n".join(lines)


class LegacyUI:
    """Line-oriented output with no styling."""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def log(self, msg: str) -> None:
        print(msg, flush=True)

    def error(self, msg: str) -> None:
        print(msg, file=sys.stderr, flush=True)

    def collecting(self, name: str) -> None:
        self.log(f"Collecting info for: {name}…")

    def show_audio_streams(self, streams: Sequence[AudioStream]) -> None:
        self.log(render_table(AUDIO_HEADERS, audio_rows(streams)))

    def show_subtitle_streams(self, streams: Sequence[SubtitleStream]) -> None:
        self.log(render_table(SUBTITLE_HEADERS, subtitle_rows(streams)))

    def show_command(self, cmd: Sequence[str]) -> None:
        if self.debug:
            self.log("CMD: " + shlex.join(cmd))

    def progress(self, current: int, total: int, name: str, percent: str, speed: str) -> None:
        self.log(format_progress_line(current, total, name, percent, speed))

    def conversion_failed(self, name: str, stderr: str) -> None:
        self.log(f"\n{name}\n{stderr}")

    def summary(self, succeeded: int, failed: int, elapsed: float) -> None:
        if failed:
            self.log(f"\nFINISHED WITH {failed} ERRORS")
        else:
            self.log("\nSUCCESS")
