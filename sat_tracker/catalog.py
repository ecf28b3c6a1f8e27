"""The fixed satellite catalog and helpers for loading replacements."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .tle import OrbitalElementSet, parse_text


class CatalogLookupError(KeyError):
    """Raised when a NORAD id is required but not present in the catalog."""


class Catalog:
    """Immutable, ordered collection of element sets.

    Enumeration order is insertion order. Numeric ids handed out by
    :meth:`numbered` are ``1 + position`` and therefore only stable while the
    catalog itself is unchanged.
    """

    def __init__(self, entries: Iterable[OrbitalElementSet]) -> None:
        self._entries: Tuple[OrbitalElementSet, ...] = tuple(entries)

    def __iter__(self) -> Iterator[OrbitalElementSet]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> OrbitalElementSet:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"Catalog({len(self._entries)} entries)"

    @property
    def entries(self) -> Tuple[OrbitalElementSet, ...]:
        return self._entries

    def numbered(self) -> Iterator[Tuple[int, OrbitalElementSet]]:
        return enumerate(self._entries, start=1)

    def get(self, norad_id: str) -> Optional[OrbitalElementSet]:
        wanted = str(norad_id).strip()
        for entry in self._entries:
            if entry.norad_id == wanted:
                return entry
        return None

    def require(self, norad_id: str) -> OrbitalElementSet:
        entry = self.get(norad_id)
        if entry is None:
            raise CatalogLookupError(f"NORAD {norad_id} is not in the catalog")
        return entry

    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]


def load_catalog(path: Path) -> Catalog:
    """Build a catalog from a two- or three-line TLE file."""

    text = Path(path).expanduser().read_text(encoding="utf-8")
    return Catalog(parse_text(text))


DEFAULT_CATALOG = Catalog(
    [
        OrbitalElementSet(
            name="ISS (ZARYA)",
            norad_id="25544",
            line1="1 25544U 98067A   23135.56602164  .00011943  00000+0  21731-3 0  9998",
            line2="2 25544  51.6412 139.8584 0005939  99.5777  22.5867 15.50422536396628",
        ),
        OrbitalElementSet(
            name="HUBBLE",
            norad_id="20580",
            line1="1 20580U 90037B   23135.59702084  .00001047  00000+0  57648-4 0  9998",
            line2="2 20580  28.4698  49.9784 0002983 151.9235 208.1888 15.09757481280533",
        ),
        OrbitalElementSet(
            name="NOAA 19",
            norad_id="33591",
            line1="1 33591U 09005A   23135.62881757  .00000185  00000+0  12992-3 0  9992",
            line2="2 33591  99.1772  90.1232 0014038  64.8196 295.4420 14.12638143736516",
        ),
        OrbitalElementSet(
            name="STARLINK-1832",
            norad_id="48232",
            line1="1 48232U 21021F   23135.56248697  .00008234  00000+0  45795-3 0  9995",
            line2="2 48232  53.0545  34.9888 0001361  82.3002 277.8132 15.06457568118084",
        ),
        OrbitalElementSet(
            name="METEOR-M 2",
            norad_id="40069",
            line1="1 40069U 14037A   23135.62113429  .00000063  00000+0  47250-4 0  9996",
            line2="2 40069  98.5818  62.5093 0005173 155.1681 204.9752 14.20710431461203",
        ),
        OrbitalElementSet(
            name="TERRA",
            norad_id="25994",
            line1="1 25994U 99068A   23135.55900412  .00000040  00000+0  27398-4 0  9997",
            line2="2 25994  98.1710  86.9662 0001433  83.9917 276.1433 14.57113761241944",
        ),
        OrbitalElementSet(
            name="SUOMI NPP",
            norad_id="37849",
            line1="1 37849U 11061A   23135.61671031  .00000027  00000+0  29939-4 0  9993",
            line2="2 37849  98.7134  72.8358 0000853  85.4175 274.7093 14.19552906598662",
        ),
        OrbitalElementSet(
            name="GOES 16",
            norad_id="41866",
            line1="1 41866U 16071A   23135.62499632 -.00000094  00000+0  00000+0 0  9997",
            line2="2 41866   0.0484 266.3489 0000574 221.5529 249.1005  1.00269684 24028",
        ),
        OrbitalElementSet(
            name="LANDSAT 8",
            norad_id="39084",
            line1="1 39084U 13008A   23135.55893681  .00000026  00000+0  17800-4 0  9992",
            line2="2 39084  98.2301  84.9321 0001409  87.6342 272.4984 14.57111493544320",
        ),
        OrbitalElementSet(
            name="AQUA",
            norad_id="27424",
            line1="1 27424U 02022A   23135.58887214  .00000037  00000+0  25849-4 0  9993",
            line2="2 27424  98.2118  86.3760 0001663  89.0988 271.0373 14.57116299111065",
        ),
    ]
)


__all__ = ["Catalog", "CatalogLookupError", "DEFAULT_CATALOG", "load_catalog"]
