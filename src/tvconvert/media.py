"""
Movie identity for tvconvert.

A MediaItem is one unit of work: a title, a release year and the container
file to convert. Items are created from the run configuration and never
mutated afterwards.
"""

import datetime
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

# Roundhay Garden Scene (1888) is believed to be the oldest surviving film
EARLIEST_YEAR = 1888

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_ ]")


def current_year() -> int:
    """Return the current calendar year."""
    return datetime.date.today().year


@dataclass(frozen=True)
class MediaItem:
    """A movie to convert."""

    title: str
    year: int
    input_file_path: Path

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaItem":
        """Build an item from a run configuration entry (camelCase keys)."""
        raw_path = data.get("inputFilePath")
        return cls(
            title=data.get("title"),  # type: ignore[arg-type]
            year=data.get("year"),  # type: ignore[arg-type]
            input_file_path=Path(raw_path) if isinstance(raw_path, str) else raw_path,  # type: ignore[arg-type]
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "year": self.year,
            "inputFilePath": str(self.input_file_path),
        }

    def fully_qualified_name(self, file_name_safe: bool = False) -> str:
        """
        Return "Title (Year)".

        With file_name_safe, every character outside [a-zA-Z0-9-_ ] is
        stripped from the title so the result can be used as a file name.
        """
        title = self.title
        if file_name_safe:
            title = _UNSAFE_CHARS.sub("", title)
        return f"{title} ({self.year})"

    def has_valid_title(self) -> bool:
        return isinstance(self.title, str) and len(self.title) > 0

    def has_valid_year(self) -> bool:
        # bool is an int subclass; reject it explicitly
        if not isinstance(self.year, int) or isinstance(self.year, bool):
            return False
        return EARLIEST_YEAR <= self.year <= current_year()

    def has_valid_input_file_path(self) -> bool:
        if not isinstance(self.input_file_path, Path):
            return False
        return self.input_file_path.is_file()
