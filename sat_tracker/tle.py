"""Utilities for working with two-line element (TLE) sets."""
from __future__ import annotations

import dataclasses
import datetime as dt
from typing import List, Optional

TLE_LINE_LENGTH = 69

# Zero-based columns that must hold a blank or a decimal point.
_LINE1_LAYOUT = {1: " ", 8: " ", 23: ".", 32: " ", 34: ".", 43: " ", 52: " ", 61: " ", 63: " "}
_LINE2_LAYOUT = {1: " ", 7: " ", 11: ".", 16: " ", 20: ".", 25: " ", 33: " ", 37: ".", 42: " ", 46: ".", 51: " "}


class ElementSetError(ValueError):
    """Raised when an element set does not follow the NORAD two-line format."""


@dataclasses.dataclass(frozen=True)
class OrbitalElementSet:
    """A named satellite and its two element lines.

    Instances are kept raw: nothing is checked on construction so that a
    catalog can hold a malformed entry without failing as a whole. Call
    :func:`validate` before handing the lines to a propagator.
    """

    name: str
    norad_id: str
    line1: str
    line2: str

    @property
    def epoch(self) -> dt.datetime:
        return epoch(self.line1)

    def as_text(self, include_name: bool = True) -> str:
        lines = []
        if include_name and self.name:
            lines.append(self.name)
        lines.extend([self.line1, self.line2])
        return "\n".join(lines) + "\n"


def checksum(line: str) -> bool:
    """Return ``True`` when ``line`` satisfies the NORAD checksum rule."""

    line = line.rstrip()
    if not line:
        return False
    try:
        expected = int(line[-1])
    except ValueError:
        return False

    total = 0
    for ch in line[:-1]:
        if ch.isdigit():
            total += int(ch)
        elif ch == "-":
            total += 1
    return (total % 10) == expected


def _catnum_field(line: str) -> str:
    return line[2:7].strip()


def _check_layout(line: str, layout: dict, label: str) -> None:
    for column, expected in layout.items():
        if line[column] != expected:
            raise ElementSetError(
                f"{label}: expected {expected!r} in column {column + 1}, found {line[column]!r}"
            )


def validate(element_set: OrbitalElementSet) -> None:
    """Check column layout, checksums and catalog numbers of both lines."""

    line1 = element_set.line1.rstrip()
    line2 = element_set.line2.rstrip()

    if len(line1) != TLE_LINE_LENGTH or len(line2) != TLE_LINE_LENGTH:
        raise ElementSetError(
            f"lines must be {TLE_LINE_LENGTH} columns, got {len(line1)} and {len(line2)}"
        )
    if not line1.startswith("1 ") or not line2.startswith("2 "):
        raise ElementSetError("bad TLE line prefixes")
    _check_layout(line1, _LINE1_LAYOUT, "line 1")
    _check_layout(line2, _LINE2_LAYOUT, "line 2")
    if not checksum(line1):
        raise ElementSetError("line 1 checksum failed")
    if not checksum(line2):
        raise ElementSetError("line 2 checksum failed")
    if _catnum_field(line1) != _catnum_field(line2):
        raise ElementSetError("catalog numbers differ between L1 and L2")


def parse_text(text: str) -> List[OrbitalElementSet]:
    """Parse a two- or three-line TLE file into element sets.

    Lines are not validated here; a bad pair still becomes an entry and is
    rejected later, when it is propagated.
    """

    lines = [ln.rstrip() for ln in text.splitlines() if ln.strip()]
    entries: List[OrbitalElementSet] = []
    name: Optional[str] = None
    idx = 0
    while idx < len(lines):
        current = lines[idx]
        if current.startswith("1 ") and idx + 1 < len(lines) and lines[idx + 1].startswith("2 "):
            line1, line2 = current, lines[idx + 1]
            norad_id = _catnum_field(line1)
            entries.append(
                OrbitalElementSet(name=name or norad_id, norad_id=norad_id, line1=line1, line2=line2)
            )
            name = None
            idx += 2
            continue
        name = current.strip()
        idx += 1
    return entries


def epoch(line1: str) -> dt.datetime:
    """Parse the epoch from line 1 into a timezone-aware UTC datetime."""

    year2 = int(line1[18:20])
    doy = float(line1[20:32])
    year = 1900 + year2 if year2 >= 57 else 2000 + year2
    day_int = int(doy)
    frac = doy - day_int
    base = dt.datetime(year, 1, 1, tzinfo=dt.timezone.utc) + dt.timedelta(days=day_int - 1)
    return base + dt.timedelta(seconds=frac * 86400.0)


__all__ = [
    "ElementSetError",
    "OrbitalElementSet",
    "TLE_LINE_LENGTH",
    "checksum",
    "epoch",
    "parse_text",
    "validate",
]
