"""
Batch orchestration for tvconvert.

All movies are probed and their tracks chosen up front, so the operator
answers every prompt before the first ffmpeg run starts. Conversions then run
one at a time, and the batch result is reported once all of them finished.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from tvconvert.config import RunConfig, Settings
from tvconvert.converter import ConversionOutcome, run_conversion
from tvconvert.media import MediaItem
from tvconvert.notifications import notify_batch
from tvconvert.planner import ConversionPlan
from tvconvert.probe import probe_container
from tvconvert.process import ProcessRunner
from tvconvert.selector import LinePrompt, select_audio_stream, select_subtitle_stream


class MovieJob:
    """Working state of one movie: its plan, then its outcome."""

    def __init__(self, item: MediaItem):
        self.item = item
        self._plan: Optional[ConversionPlan] = None
        self._outcome: Optional[ConversionOutcome] = None

    @property
    def name(self) -> str:
        return self.item.fully_qualified_name()

    @property
    def plan(self) -> ConversionPlan:
        if self._plan is None:
            raise RuntimeError("prepare() must be called before the plan is used")
        return self._plan

    @property
    def outcome(self) -> ConversionOutcome:
        if self._outcome is None:
            raise RuntimeError(f"Conversion of {self.name} did not finish yet")
        return self._outcome

    def prepare(self, ffprobe_path, prompt: LinePrompt, ui, runner: ProcessRunner) -> ConversionPlan:
        """Probe the input file and let the operator pick its tracks."""
        ui.collecting(self.name)
        info = probe_container(ffprobe_path, self.item.input_file_path, runner)
        audio = select_audio_stream(info.audio_streams, prompt, ui)
        subtitle = select_subtitle_stream(info.subtitle_streams, prompt, ui)
        self._plan = ConversionPlan.from_selection(info, audio, subtitle)
        return self._plan

    def convert(
        self, ffmpeg_path, output_dir, current_index: int, total: int, ui, runner: ProcessRunner
    ) -> ConversionOutcome:
        """Run ffmpeg for this movie. The outcome can be set only once."""
        if self._outcome is not None:
            raise RuntimeError(f"{self.name} was already converted")
        plan = self.plan
        self._outcome = run_conversion(
            ffmpeg_path,
            self.item,
            plan,
            output_dir,
            current_index,
            total,
            ui,
            runner,
        )
        return self._outcome


@dataclass
class BatchResult:
    """Movies grouped by how their conversion ended."""

    succeeded: List[MovieJob] = field(default_factory=list)
    failed: List[MovieJob] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed


class BatchOrchestrator:
    """Runs prepare for every movie, then converts them in order."""

    def __init__(
        self,
        config: RunConfig,
        ui,
        prompt: LinePrompt,
        settings: Optional[Settings] = None,
        runner: Optional[ProcessRunner] = None,
    ):
        self.config = config
        self.ui = ui
        self.prompt = prompt
        self.settings = settings if settings is not None else Settings()
        self.runner = runner if runner is not None else ProcessRunner()
        self.jobs = [MovieJob(item) for item in config.movies]

    def prepare_all(self) -> None:
        for job in self.jobs:
            job.prepare(self.config.ffprobe_binary_path, self.prompt, self.ui, self.runner)

    def convert_all(self) -> None:
        total = len(self.jobs)
        for current_index, job in enumerate(self.jobs, start=1):
            job.convert(
                self.config.ffmpeg_binary_path,
                self.config.output_folder_path,
                current_index,
                total,
                self.ui,
                self.runner,
            )

    def run(self) -> BatchResult:
        """
        Process the whole batch and report the result.

        A probe or selection error raised while preparing stops the batch
        before anything is converted.
        """
        start_time = time.time()
        self.prepare_all()
        self.convert_all()

        result = BatchResult(elapsed=time.time() - start_time)
        for job in self.jobs:
            if job.outcome.successful:
                result.succeeded.append(job)
            else:
                result.failed.append(job)

        for job in result.failed:
            self.ui.conversion_failed(job.name, job.outcome.stderr)
        self.ui.summary(len(result.succeeded), len(result.failed), result.elapsed)
        notify_batch(len(result.succeeded), len(result.failed), result.elapsed, self.settings)
        return result

