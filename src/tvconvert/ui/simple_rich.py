"""
Rich-based output for tvconvert.

Stream catalogs are shown as tables, progress lines and status messages are
styled, and the batch ends with a summary table.

Respects:
- NO_COLOR environment variable
- TVCONVERT_SCRIPT_MODE environment variable
- sys.stdout.isatty() for automatic detection
"""

import os
import shlex
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from tvconvert.probe import AudioStream, SubtitleStream
from tvconvert.ui.legacy_ui import (
    AUDIO_HEADERS,
    SUBTITLE_HEADERS,
    audio_rows,
    fmt_hms,
    format_progress_line,
    subtitle_rows,
)


def _should_use_color() -> bool:
    """Check if color output should be used."""
    # https://no-color.org/
    if os.getenv("NO_COLOR"):
        return False
    if os.getenv("TVCONVERT_SCRIPT_MODE"):
        return False
    try:
        if not sys.stdout.isatty():
            return False
    except (AttributeError, ValueError):
        return False
    return True


class SimpleRichUI:
    """Styled sequential output."""

    def __init__(self, debug: bool = False, console: Optional[Console] = None):
        self.debug = debug
        if console is None:
            use_color = _should_use_color()
            console = Console(
                force_terminal=use_color if use_color else None,
                no_color=not use_color,
            )
        self.console = console
        self.err_console = Console(stderr=True, no_color=console.no_color)

    def log(self, msg: str, style: str = "") -> None:
        """Print a message verbatim (no markup interpretation)."""
        self.console.print(Text(msg, style=style))

    def error(self, msg: str) -> None:
        self.err_console.print(Text(msg, style="red"))

    def collecting(self, name: str) -> None:
        self.console.print()
        self.console.print(Text.assemble(("▶ ", "bold blue"), (f"Collecting info for: {name}…", "cyan")))

    def _table(self, title: str, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        table = Table(title=title)
        for header in headers:
            table.add_column(header, justify="right" if header == "Index" else "left")
        for row in rows:
            table.add_row(*(Text(cell) for cell in row))
        self.console.print(table)

    def show_audio_streams(self, streams: Sequence[AudioStream]) -> None:
        self._table("Audio streams", AUDIO_HEADERS, audio_rows(streams))

    def show_subtitle_streams(self, streams: Sequence[SubtitleStream]) -> None:
        self._table("Subtitle streams", SUBTITLE_HEADERS, subtitle_rows(streams))

    def show_command(self, cmd: Sequence[str]) -> None:
        if self.debug:
            self.log("CMD: " + shlex.join(cmd), style="dim")

    def progress(self, current: int, total: int, name: str, percent: str, speed: str) -> None:
        self.log(format_progress_line(current, total, name, percent, speed))

    def conversion_failed(self, name: str, stderr: str) -> None:
        self.console.print()
        self.console.print(Text(f"✗ {name}", style="bold red"))
        # ffmpeg's own line breaks only
        self.console.print(Text(stderr), soft_wrap=True)

    def summary(self, succeeded: int, failed: int, elapsed: float) -> None:
        """Print final summary."""
        self.console.print()

        table = Table(title="Summary", box=None, show_header=False)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("✓ Converted", f"[green]{succeeded}[/green]")
        table.add_row("✗ Failed", f"[red]{failed}[/red]")
        table.add_row("⏱ Total time", fmt_hms(elapsed))

        self.console.print(table)
        if failed:
            self.console.print(Text(f"FINISHED WITH {failed} ERRORS", style="bold red"))
        else:
            self.console.print(Text("SUCCESS", style="bold green"))
