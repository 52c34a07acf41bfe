"""
Conversion planning for tvconvert.

Turns a stream catalog and the operator's selection into ffmpeg arguments:

- a primary MKV output that copies every stream, with the selected audio
  stream duplicated in front as a stereo AAC track marked default
- an optional .srt output holding the selected subtitle stream

plus the destination layout under the output folder. Everything here is a
pure function of its inputs; nothing touches the filesystem except
ensure_output_subfolder().
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from tvconvert.media import MediaItem
from tvconvert.probe import AudioStream, ContainerInfo, SubtitleStream

READY_FOLDER = "ready"
EXTERNAL_SUBTITLE_FOLDER = "external_subtitle_needed"

UNKNOWN_LANGUAGE = "???"

# Settings of the stereo track placed first in the output
STEREO_CODEC = "aac"
STEREO_BITRATE = "128k"
STEREO_CHANNELS = "2"
STEREO_LAYOUT = "stereo"

GLOBAL_ARGS: Tuple[str, ...] = (
    "-hide_banner",
    "-loglevel",
    "warning",
    "-nostats",
    "-progress",
    "pipe:1",
    "-y",
)


@dataclass(frozen=True)
class ConversionPlan:
    """What to convert for one movie."""

    duration_seconds: float
    audio_streams: Tuple[AudioStream, ...]
    selected_audio_stream: AudioStream
    subtitle_streams: Tuple[SubtitleStream, ...]
    selected_subtitle_stream: Optional[SubtitleStream] = None

    def __post_init__(self) -> None:
        if self.selected_audio_stream not in self.audio_streams:
            raise ValueError(f"Selected audio stream {self.selected_audio_stream.index} is not in the catalog")
        if self.selected_subtitle_stream is not None and self.selected_subtitle_stream not in self.subtitle_streams:
            raise ValueError(f"Selected subtitle stream {self.selected_subtitle_stream.index} is not in the catalog")

    @classmethod
    def from_selection(
        cls,
        info: ContainerInfo,
        audio: AudioStream,
        subtitle: Optional[SubtitleStream],
    ) -> "ConversionPlan":
        return cls(
            duration_seconds=info.duration_seconds,
            audio_streams=info.audio_streams,
            selected_audio_stream=audio,
            subtitle_streams=info.subtitle_streams,
            selected_subtitle_stream=subtitle,
        )

    @property
    def has_internal_subtitle(self) -> bool:
        return self.selected_subtitle_stream is not None


# -------------------- STREAM METADATA --------------------


def stream_title(
    language: Optional[str],
    codec_name: str,
    original_title: Optional[str],
    channel_layout: Optional[str] = None,
) -> str:
    """Build a stream title like "eng ac3 5.1(side) [Director's commentary]"."""
    title = f"{language or UNKNOWN_LANGUAGE} {codec_name}"
    if channel_layout is not None:
        title += f" {channel_layout}"
    if original_title is not None:
        title += f" [{original_title}]"
    return title


def disposition_value(dispositions_without_default: Sequence[str], is_default: bool) -> str:
    """Join dispositions with "+", putting "default" first when is_default."""
    flags = list(dispositions_without_default)
    if is_default:
        flags.insert(0, "default")
    return "+".join(flags)


def stream_metadata_args(
    specifier: str,
    language: Optional[str],
    codec_name: str,
    original_title: Optional[str],
    channel_layout: Optional[str] = None,
) -> List[str]:
    args = [
        f"-metadata:s:{specifier}",
        "title=" + stream_title(language, codec_name, original_title, channel_layout),
    ]
    if language is not None:
        args += [f"-metadata:s:{specifier}", f"language={language}"]
    return args


def stream_disposition_args(specifier: str, dispositions_without_default: Sequence[str], is_default: bool) -> List[str]:
    """Return the -disposition option for a stream, or nothing if no flag is set."""
    value = disposition_value(dispositions_without_default, is_default)
    if value == "":
        return []
    return [f"-disposition:{specifier}", value]


# -------------------- DESTINATION LAYOUT --------------------


def output_subfolder_path(output_dir: Path, item: MediaItem, plan: ConversionPlan) -> Path:
    """
    Return the folder the outputs of item go to.

    Movies with an internal subtitle are ready to watch; the others still need
    an external subtitle file and are kept apart.
    """
    folder = READY_FOLDER if plan.has_internal_subtitle else EXTERNAL_SUBTITLE_FOLDER
    return Path(output_dir) / folder / item.fully_qualified_name(file_name_safe=True)


def mkv_output_path(output_dir: Path, item: MediaItem, plan: ConversionPlan) -> Path:
    subfolder = output_subfolder_path(output_dir, item, plan)
    return subfolder / f"{item.fully_qualified_name(file_name_safe=True)}.mkv"


def srt_output_path(output_dir: Path, item: MediaItem, plan: ConversionPlan) -> Optional[Path]:
    subtitle = plan.selected_subtitle_stream
    if subtitle is None:
        return None
    subfolder = output_subfolder_path(output_dir, item, plan)
    name = ".".join([item.fully_qualified_name(file_name_safe=True), subtitle.language or UNKNOWN_LANGUAGE, "srt"])
    return subfolder / name


def ensure_output_subfolder(output_dir: Path, item: MediaItem, plan: ConversionPlan) -> Path:
    subfolder = output_subfolder_path(output_dir, item, plan)
    subfolder.mkdir(parents=True, exist_ok=True)
    return subfolder


# -------------------- OUTPUT ARGUMENTS --------------------


def build_mkv_output_args(plan: ConversionPlan, output_path: Path) -> List[str]:
    """
    Return the ffmpeg output options for the primary MKV.

    Output audio 0 is the selected stream transcoded to stereo AAC and marked
    default. Output audio 1..N are all source audio streams copied in catalog
    order (the selected one included), followed by all subtitle streams.
    """
    selected = plan.selected_audio_stream

    args = [
        # copy every stream unless told otherwise below
        "-codec",
        "copy",
        # drop global metadata and chapters
        "-map_metadata",
        "-1",
        "-map_chapters",
        "-1",
        # video streams, excluding attached pictures and cover art
        "-map",
        "0:V",
        "-map",
        f"0:{selected.index}",
    ]
    for audio in plan.audio_streams:
        args += ["-map", f"0:{audio.index}"]
    for subtitle in plan.subtitle_streams:
        args += ["-map", f"0:{subtitle.index}"]

    args += [
        "-codec:a:0",
        STEREO_CODEC,
        "-b:a:0",
        STEREO_BITRATE,
        "-ac:a:0",
        STEREO_CHANNELS,
    ]
    args += stream_metadata_args("a:0", selected.language, STEREO_CODEC, selected.title, STEREO_LAYOUT)
    args += stream_disposition_args("a:0", selected.dispositions_without_default, True)

    for i, audio in enumerate(plan.audio_streams, start=1):
        args += stream_metadata_args(f"a:{i}", audio.language, audio.codec_name, audio.title, audio.channel_layout)
        args += stream_disposition_args(f"a:{i}", audio.dispositions_without_default, False)

    for i, subtitle in enumerate(plan.subtitle_streams):
        args += stream_metadata_args(f"s:{i}", subtitle.language, subtitle.codec_name, subtitle.title)
        args += stream_disposition_args(f"s:{i}", subtitle.dispositions_without_default, False)

    args.append(str(output_path))
    return args


def build_srt_output_args(plan: ConversionPlan, output_path: Optional[Path]) -> List[str]:
    """Return the ffmpeg output options extracting the selected subtitle, if any."""
    subtitle = plan.selected_subtitle_stream
    if subtitle is None or output_path is None:
        return []
    return ["-map", f"0:{subtitle.index}", str(output_path)]


def build_ffmpeg_cmd(
    ffmpeg_path: Union[str, Path],
    item: MediaItem,
    plan: ConversionPlan,
    output_dir: Path,
) -> List[str]:
    """Return the complete ffmpeg command line for item."""
    return [
        str(ffmpeg_path),
        *GLOBAL_ARGS,
        "-i",
        str(item.input_file_path),
        *build_mkv_output_args(plan, mkv_output_path(output_dir, item, plan)),
        *build_srt_output_args(plan, srt_output_path(output_dir, item, plan)),
    ]
