"""
Interactive track selection for tvconvert.

The operator picks exactly one audio stream and at most one subtitle stream
per movie. Any answer that does not identify a catalogued stream is simply
asked again.
"""

from typing import Callable, Optional, Sequence, TypeVar

from rich.console import Console

from tvconvert.probe import AudioStream, Stream, SubtitleStream

# Asks a question and returns the operator's answer, stripped
LinePrompt = Callable[[str], str]

# Subtitle codecs that can be written to an .srt file
TEXT_SUBTITLE_CODECS = frozenset({"subrip", "srt", "ass", "ssa", "webvtt", "mov_text", "text"})

AUDIO_QUESTION = "Select audio stream index: "
SUBTITLE_QUESTION = "Select subtitle stream index (leave empty if using external subtitles): "

S = TypeVar("S", bound=Stream)

_prompt_console: Optional[Console] = None


class SelectionError(Exception):
    """Raised when no valid selection is possible."""


def console_prompt(question: str) -> str:
    """Read one line from the terminal."""
    global _prompt_console
    if _prompt_console is None:
        _prompt_console = Console()
    return _prompt_console.input(question).strip()


def parse_index(answer: str) -> Optional[int]:
    """Return answer as a stream index, or None if it is not an integer."""
    try:
        return int(answer.strip(), 10)
    except ValueError:
        return None


def find_stream(streams: Sequence[S], index: Optional[int]) -> Optional[S]:
    if index is None:
        return None
    for stream in streams:
        if stream.index == index:
            return stream
    return None


def is_text_subtitle(stream: SubtitleStream) -> bool:
    return (stream.codec_name or "").lower() in TEXT_SUBTITLE_CODECS


def select_audio_stream(streams: Sequence[AudioStream], prompt: LinePrompt, ui) -> AudioStream:
    """
    Show the audio streams and ask until one of them is chosen.

    Raises:
        SelectionError: if the container has no audio stream at all.
    """
    if not streams:
        raise SelectionError("No audio streams found")

    ui.show_audio_streams(streams)
    while True:
        selected = find_stream(streams, parse_index(prompt(AUDIO_QUESTION)))
        if selected is not None:
            return selected


def select_subtitle_stream(
    streams: Sequence[SubtitleStream], prompt: LinePrompt, ui
) -> Optional[SubtitleStream]:
    """
    Show the text subtitle streams and ask for one, or none.

    An empty answer means an external subtitle file will be supplied later.
    Answers are looked up in the full catalog; bitmap subtitles are only
    hidden from the table.
    """
    ui.show_subtitle_streams([s for s in streams if is_text_subtitle(s)])
    while True:
        answer = prompt(SUBTITLE_QUESTION).strip()
        if answer == "":
            return None
        selected = find_stream(streams, parse_index(answer))
        if selected is not None:
            return selected
