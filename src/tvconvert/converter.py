"""
Running ffmpeg for tvconvert.

Contains:
- Progress parsing for ffmpeg's "-progress pipe:1" output
- The conversion outcome record
- run_conversion(), which executes a planned conversion
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from tvconvert.media import MediaItem
from tvconvert.planner import ConversionPlan, build_ffmpeg_cmd, ensure_output_subfolder
from tvconvert.process import ProcessRunner

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class ConversionOutcome:
    """How one ffmpeg run ended."""

    successful: bool
    stderr: str
    # -1 when ffmpeg never ran
    returncode: int


# -------------------- PROGRESS PARSING --------------------


def format_percent(normalized_progress: float) -> str:
    """Format a 0..1 progress value as a percentage with two decimals, clamped to 0..100."""
    percent = min(100.0, max(0.0, normalized_progress * 100))
    return f"{percent:.2f}"


def parse_progress_block(block: Dict[str, str], duration_seconds: float) -> Optional[Dict[str, str]]:
    """
    Evaluate one block of ffmpeg progress values.

    Returns a dict with "percent" (formatted, two decimals) and "speed", or
    None when the block carries no usable position yet (a missing value or
    "N/A" for out_time_us or speed) or the duration is unknown.
    """
    out_time_us = block.get("out_time_us")
    speed = block.get("speed")
    if out_time_us is None or speed is None:
        return None
    if out_time_us == NOT_AVAILABLE or speed == NOT_AVAILABLE:
        return None
    if duration_seconds <= 0:
        return None

    try:
        out_time_seconds = int(out_time_us) / 1e6
    except ValueError:
        return None

    return {
        "percent": format_percent(out_time_seconds / duration_seconds),
        "speed": speed.strip(),
    }


# Called with (percent, speed) whenever the displayed percentage changes
ProgressCallback = Callable[[str, str], None]


class ProgressMonitor:
    """
    Consumes ffmpeg progress output line by line.

    ffmpeg writes key=value lines and ends every block with
    "progress=continue" (or "progress=end"). The callback fires only when
    the two-decimal percentage differs from the last reported value.
    """

    def __init__(self, duration_seconds: float, on_progress: ProgressCallback):
        self.duration_seconds = duration_seconds
        self.on_progress = on_progress
        self.last_percent = format_percent(0)
        self._block: Dict[str, str] = {}

    def feed_line(self, line: str) -> None:
        key, sep, value = line.strip().partition("=")
        if not sep:
            return
        if key == "progress":
            block, self._block = self._block, {}
            self._evaluate(block)
        else:
            self._block[key] = value

    def feed(self, text: str) -> None:
        """Feed a chunk holding any number of lines."""
        for line in text.splitlines():
            self.feed_line(line)

    def _evaluate(self, block: Dict[str, str]) -> None:
        progress = parse_progress_block(block, self.duration_seconds)
        if progress is None:
            return
        if progress["percent"] != self.last_percent:
            self.last_percent = progress["percent"]
            self.on_progress(progress["percent"], progress["speed"])


# -------------------- HIGH-LEVEL CONVERSION --------------------


def run_conversion(
    ffmpeg_path: Union[str, Path],
    item: MediaItem,
    plan: ConversionPlan,
    output_dir: Path,
    current_index: int,
    total: int,
    ui,
    runner: Optional[ProcessRunner] = None,
) -> ConversionOutcome:
    """
    Convert one movie according to plan.

    The destination folder is created first; if that fails the outcome is a
    failure and ffmpeg is not started. Progress lines are sent to ui as
    the percentage changes; ffmpeg's diagnostic output is kept in full for the
    final report.

    Returns:
        ConversionOutcome, successful if ffmpeg exited with status 0.
    """
    if runner is None:
        runner = ProcessRunner()

    try:
        ensure_output_subfolder(output_dir, item, plan)
    except OSError as e:
        return ConversionOutcome(successful=False, stderr=f"Cannot create output folder: {e}", returncode=-1)

    cmd = build_ffmpeg_cmd(ffmpeg_path, item, plan, output_dir)
    ui.show_command(cmd)

    name = item.fully_qualified_name()

    def on_progress(percent: str, speed: str) -> None:
        ui.progress(current_index, total, name, percent, speed)

    monitor = ProgressMonitor(plan.duration_seconds, on_progress)

    try:
        result = runner.stream(cmd, monitor.feed_line)
    except OSError as e:
        return ConversionOutcome(successful=False, stderr=f"Failed to start ffmpeg: {e}", returncode=-1)

    return ConversionOutcome(
        successful=result.returncode == 0,
        stderr=result.stderr,
        returncode=result.returncode,
    )
