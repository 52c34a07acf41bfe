"""
External process execution for tvconvert.

Two ways of running a tool:
- capture(): block until exit and collect all output (ffprobe)
- stream(): hand stdout to a callback line by line while stderr is drained
  on a background thread (ffmpeg)

Every spawned process is tracked so an interrupt can stop it.
"""

import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Sequence

# Track running processes for cleanup on interrupt
_active_processes: List[subprocess.Popen] = []
_processes_lock = threading.Lock()


def register_process(proc: subprocess.Popen) -> None:
    """Register a process for tracking."""
    with _processes_lock:
        _active_processes.append(proc)


def unregister_process(proc: subprocess.Popen) -> None:
    """Unregister a process from tracking."""
    with _processes_lock:
        if proc in _active_processes:
            _active_processes.remove(proc)


def active_process_count() -> int:
    with _processes_lock:
        return len(_active_processes)


def terminate_all_processes() -> int:
    """Terminate all active processes, killing those that do not exit. Returns how many were stopped."""
    with _processes_lock:
        procs = list(_active_processes)

    if not procs:
        return 0

    for proc in procs:
        if proc.poll() is None:
            try:
                proc.terminate()
            except OSError:
                pass

    time.sleep(0.5)

    for proc in procs:
        if proc.poll() is None:
            try:
                proc.kill()
            except OSError:
                pass

    for proc in procs:
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            pass

    for proc in procs:
        for pipe in (proc.stdout, proc.stderr):
            if pipe:
                pipe.close()

    with _processes_lock:
        _active_processes.clear()

    return len(procs)


@dataclass(frozen=True)
class CompletedRun:
    """Result of a finished external process."""

    returncode: int
    stdout: str
    stderr: str


LineCallback = Callable[[str], None]


class ProcessRunner:
    """Runs external tools. Tests substitute an object with the same two methods."""

    def capture(self, cmd: Sequence[str]) -> CompletedRun:
        """Run cmd to completion and return its full output."""
        proc = subprocess.Popen(
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        register_process(proc)
        try:
            stdout, stderr = proc.communicate()
        finally:
            # a process still running here is left for terminate_all_processes()
            if proc.poll() is not None:
                unregister_process(proc)
        return CompletedRun(proc.returncode, stdout, stderr)

    def stream(self, cmd: Sequence[str], on_stdout_line: LineCallback) -> CompletedRun:
        """
        Run cmd, passing each stdout line (without newline) to on_stdout_line.

        stderr is collected in full and returned once the process exits; the
        returned stdout is empty because it has already been consumed.
        """
        proc = subprocess.Popen(
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        register_process(proc)

        stderr_chunks: List[str] = []

        def drain_stderr() -> None:
            assert proc.stderr is not None
            for chunk in proc.stderr:
                stderr_chunks.append(chunk)

        reader = threading.Thread(target=drain_stderr, daemon=True)
        reader.start()

        try:
            assert proc.stdout is not None
            for line in proc.stdout:
                on_stdout_line(line.rstrip("\r\n"))
            proc.wait()
            reader.join()
        finally:
            if proc.poll() is not None:
                unregister_process(proc)

        return CompletedRun(proc.returncode, "", "".join(stderr_chunks))
