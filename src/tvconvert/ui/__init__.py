"""
User interface components for tvconvert.

Provides both Rich-based and plain text output.
"""

from typing import Union

from tvconvert.config import Settings
from tvconvert.ui.legacy_ui import LegacyUI, fmt_hms
from tvconvert.ui.simple_rich import SimpleRichUI

UI = Union[LegacyUI, SimpleRichUI]

__all__ = [
    "UI",
    "LegacyUI",
    "SimpleRichUI",
    "fmt_hms",
    "make_ui",
]


def make_ui(settings: Settings) -> UI:
    """Pick the styled UI unless progress styling is disabled."""
    if settings.progress:
        return SimpleRichUI(debug=settings.debug)
    return LegacyUI(debug=settings.debug)
