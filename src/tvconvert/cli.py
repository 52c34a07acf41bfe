"""
Command-line interface for tvconvert.

This is the main entry point for the application.
"""

import argparse
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from tvconvert import __version__
from tvconvert.config import ConfigError, RunConfig, load_settings, write_config_skeleton
from tvconvert.pipeline import BatchOrchestrator
from tvconvert.probe import ProbeError
from tvconvert.process import ProcessRunner, terminate_all_processes
from tvconvert.selector import LinePrompt, SelectionError, console_prompt
from tvconvert.ui import make_ui

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class _UsageParser(argparse.ArgumentParser):
    """ArgumentParser that prints the full help and exits with status 1 on misuse."""

    def error(self, message: str) -> NoReturn:
        self.print_help(sys.stderr)
        self.exit(EXIT_FAILURE, f"\n{self.prog}: error: {message}\n")


class _SingleModeAction(argparse.Action):
    """Store a mode path, refusing a second occurrence of the same mode."""

    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest) is not None:
            parser.error(f"argument {option_string}: given more than once")
        setattr(namespace, self.dest, values)


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="tvconvert",
        add_help=False,
        allow_abbrev=False,
        description=f"tvconvert {__version__} - batch remux movies with curated audio and subtitle tracks.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Read config from {configfile}.json:
  %(prog)s -c {configfile}.json
  %(prog)s --config {configfile}.json
Print config skeleton into {configfile}.json:
  %(prog)s -p {configfile}.json
  %(prog)s --print-config {configfile}.json
        """,
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "-c",
        "--config",
        type=Path,
        action=_SingleModeAction,
        metavar="CONFIGFILE",
        help="Run a batch from this config file",
    )
    mode.add_argument(
        "-p",
        "--print-config",
        type=Path,
        action=_SingleModeAction,
        metavar="CONFIGFILE",
        help="Write a config skeleton to this file",
    )
    return parser


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments (exits with status 1 on misuse)."""
    return build_parser().parse_args(args)


def print_config(path: Path) -> int:
    try:
        write_config_skeleton(path)
    except OSError as e:
        print(f"Cannot write {path}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def run_batch(config_path: Path, prompt: Optional[LinePrompt] = None, runner: Optional[ProcessRunner] = None) -> int:
    """Load the run configuration and convert every movie in it."""
    settings = load_settings()
    settings.apply_script_mode()
    ui = make_ui(settings)

    try:
        config = RunConfig.from_file(config_path)
    except ConfigError as e:
        ui.error(str(e))
        return EXIT_FAILURE

    orchestrator = BatchOrchestrator(
        config,
        ui,
        prompt if prompt is not None else console_prompt,
        settings=settings,
        runner=runner,
    )

    try:
        result = orchestrator.run()
    except (ProbeError, SelectionError) as e:
        ui.error(str(e))
        return EXIT_FAILURE
    except EOFError:
        ui.error("Input closed while waiting for a track selection")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        stopped = terminate_all_processes()
        if stopped:
            ui.error(f"Stopped {stopped} running process(es)")
        ui.error("Interrupted")
        return EXIT_INTERRUPTED

    return EXIT_OK if result.ok else EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        args = parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_FAILURE

    if args.print_config is not None:
        return print_config(args.print_config)
    return run_batch(args.config)


if __name__ == "__main__":
    sys.exit(main())
