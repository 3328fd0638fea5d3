"""
Standards Table Module
Read-only lookup of coefficients, size ladders and correction tables.

Every value is addressed by (category, key) and carries the code citation it
was taken from. The table is built once, from the packaged YAML catalogs or
from a mapping supplied by the caller, and exposes no way to change it
afterwards, so any number of calculations may share one instance.

Catalog sections:
- coefficients: category -> key -> {value, citation}
- ladders:      category -> key -> {values, unit, citation}
- curves:       category -> key -> {points [[x, y], ...], citation}
- bands:        category -> key -> {bands {"4-6": f, "41+": f}, citation}
- records:      category -> key -> free-form mapping
"""

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

import yaml

from .errors import ContractViolation, StandardsLookupError

logger = logging.getLogger(__name__)

CATALOGS_DIR = Path(__file__).parent / "catalogs"

SECTIONS = ("coefficients", "ladders", "curves", "bands", "records")


def load_catalog(name: str, catalogs_dir: Optional[Path] = None) -> dict:
    """Load a YAML catalog file."""
    path = Path(catalogs_dir or CATALOGS_DIR) / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found: {path}")
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def merge_catalogs(catalogs_dir: Optional[Path] = None) -> dict:
    """
    Merge every *.yaml catalog in a directory into one nested mapping.

    Raises:
        FileNotFoundError: No catalogs in the directory
        ContractViolation: The same entry is defined twice
    """
    directory = Path(catalogs_dir or CATALOGS_DIR)
    names = sorted(p.stem for p in directory.glob("*.yaml"))
    if not names:
        raise FileNotFoundError(f"No catalogs found in {directory}")

    merged: dict = {}
    for name in names:
        catalog = load_catalog(name, directory)
        for section, categories in catalog.items():
            for category, rows in (categories or {}).items():
                target = merged.setdefault(section, {}).setdefault(category, {})
                for key, row in rows.items():
                    if key in target:
                        raise ContractViolation(
                            f"Duplicate catalog entry {section}/{category}/{key} in {name}.yaml"
                        )
                    target[key] = row

    logger.debug("Loaded standards catalogs: %s", ", ".join(names))
    return merged


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


# =============================================================================
# TABLE ROW TYPES
# =============================================================================

@dataclass(frozen=True)
class StandardsEntry:
    category: str
    key: str
    value: float
    citation: str


@dataclass(frozen=True)
class Ladder:
    """Ascending sequence of standard sizes."""
    category: str
    key: str
    values: Tuple[float, ...]
    unit: str
    citation: str

    @property
    def minimum(self) -> float:
        return self.values[0]

    @property
    def maximum(self) -> float:
        return self.values[-1]

    def select(self, requirement: float) -> Optional[float]:
        """
        Smallest ladder entry >= requirement.

        An exact match selects that entry. Returns None when the requirement
        exceeds the largest entry.
        """
        idx = bisect_left(self.values, requirement)
        if idx >= len(self.values):
            return None
        return self.values[idx]

    def next_above(self, value: float) -> Optional[float]:
        """Next entry strictly larger than value, or None at the top."""
        idx = bisect_right(self.values, value)
        if idx >= len(self.values):
            return None
        return self.values[idx]

    def contains(self, value: float) -> bool:
        idx = bisect_left(self.values, value)
        return idx < len(self.values) and self.values[idx] == value


@dataclass(frozen=True)
class Interpolation:
    value: float
    rows: Tuple[Tuple[float, float], ...]
    clamped: bool = False


@dataclass(frozen=True)
class Curve:
    """Breakpoint table read by linear interpolation between adjacent rows."""
    category: str
    key: str
    points: Tuple[Tuple[float, float], ...]
    citation: str

    def interpolate(self, x: float) -> Interpolation:
        """
        Linear interpolation between the two nearest breakpoints.

        Inputs outside the table clamp to the boundary row and are flagged
        with clamped=True.
        """
        first, last = self.points[0], self.points[-1]
        if x < first[0]:
            return Interpolation(first[1], (first,), clamped=True)
        if x > last[0]:
            return Interpolation(last[1], (last,), clamped=True)

        xs = [p[0] for p in self.points]
        idx = bisect_left(xs, x)
        if xs[idx] == x:
            return Interpolation(self.points[idx][1], (self.points[idx],))

        (x0, y0), (x1, y1) = self.points[idx - 1], self.points[idx]
        value = y0 + (y1 - y0) * (x - x0) / (x1 - x0)
        return Interpolation(value, (self.points[idx - 1], self.points[idx]))


@dataclass(frozen=True)
class Band:
    low: float
    high: Optional[float]  # None for open-ended "41+" rows
    factor: float

    def contains(self, value: float) -> bool:
        return value >= self.low and (self.high is None or value <= self.high)


@dataclass(frozen=True)
class BandLookup:
    value: float
    band: Band
    clamped: bool = False


@dataclass(frozen=True)
class BandTable:
    """Range table such as NEC 310.15(C)(1): each input maps to one row."""
    category: str
    key: str
    bands: Tuple[Band, ...]
    citation: str

    def lookup(self, value: float) -> BandLookup:
        for band in self.bands:
            if band.contains(value):
                return BandLookup(band.factor, band)
        if value < self.bands[0].low:
            return BandLookup(self.bands[0].factor, self.bands[0], clamped=True)
        return BandLookup(self.bands[-1].factor, self.bands[-1], clamped=True)


def parse_band(range_str: str, factor: float) -> Band:
    """Parse a "4-6", "41+" or "5" range key into a Band."""
    text = str(range_str).strip()
    if text.endswith("+"):
        return Band(float(text[:-1]), None, float(factor))
    if "-" in text:
        low, high = text.split("-", 1)
        return Band(float(low), float(high), float(factor))
    return Band(float(text), float(text), float(factor))


# =============================================================================
# TABLE
# =============================================================================

class StandardsTable:
    """
    Immutable standards data keyed by (category, key).

    Construct with StandardsTable(mapping) for fixtures or
    StandardsTable.load() for the packaged catalogs.
    """

    __slots__ = ("_coefficients", "_ladders", "_curves", "_bands", "_records")

    def __init__(self, data: Mapping[str, Any]):
        unknown = set(data) - set(SECTIONS)
        if unknown:
            raise ContractViolation(f"Unknown catalog sections: {sorted(unknown)}")

        coefficients = {}
        for category, key, raw in _iter_rows(data.get("coefficients")):
            coefficients[(category, key)] = StandardsEntry(
                category, key, float(raw["value"]), str(raw.get("citation", ""))
            )

        ladders = {}
        for category, key, raw in _iter_rows(data.get("ladders")):
            values = tuple(float(v) for v in raw["values"])
            if not values or any(b <= a for a, b in zip(values, values[1:])):
                raise ContractViolation(f"Ladder {category}/{key} must be non-empty and strictly increasing")
            ladders[(category, key)] = Ladder(
                category, key, values, str(raw.get("unit", "")), str(raw.get("citation", ""))
            )

        curves = {}
        for category, key, raw in _iter_rows(data.get("curves")):
            points = tuple((float(x), float(y)) for x, y in raw["points"])
            xs = [p[0] for p in points]
            if not points or any(b <= a for a, b in zip(xs, xs[1:])):
                raise ContractViolation(f"Curve {category}/{key} breakpoints must be strictly increasing")
            curves[(category, key)] = Curve(category, key, points, str(raw.get("citation", "")))

        bands = {}
        for category, key, raw in _iter_rows(data.get("bands")):
            rows = tuple(sorted(
                (parse_band(r, f) for r, f in raw["bands"].items()),
                key=lambda b: b.low
            ))
            bands[(category, key)] = BandTable(category, key, rows, str(raw.get("citation", "")))

        records = {}
        for category, key, raw in _iter_rows(data.get("records")):
            records[(category, key)] = _freeze(raw)

        object.__setattr__(self, "_coefficients", MappingProxyType(coefficients))
        object.__setattr__(self, "_ladders", MappingProxyType(ladders))
        object.__setattr__(self, "_curves", MappingProxyType(curves))
        object.__setattr__(self, "_bands", MappingProxyType(bands))
        object.__setattr__(self, "_records", MappingProxyType(records))

    def __setattr__(self, name, value):
        raise AttributeError("StandardsTable is read-only")

    def __delattr__(self, name):
        raise AttributeError("StandardsTable is read-only")

    @classmethod
    def load(cls, catalogs_dir: Optional[Path] = None) -> "StandardsTable":
        """Build the table from every *.yaml catalog in catalogs_dir."""
        return cls(merge_catalogs(catalogs_dir))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def entry(self, category: str, key: str) -> StandardsEntry:
        return self._get(self._coefficients, "coefficient", category, key)

    def ladder(self, category: str, key: str) -> Ladder:
        return self._get(self._ladders, "ladder", category, key)

    def curve(self, category: str, key: str) -> Curve:
        return self._get(self._curves, "curve", category, key)

    def bands(self, category: str, key: str) -> BandTable:
        return self._get(self._bands, "band table", category, key)

    def record(self, category: str, key: str) -> Mapping[str, Any]:
        return self._get(self._records, "record", category, key)

    def keys(self, kind: str, category: str) -> Tuple[str, ...]:
        """Keys defined for a category in one section, in catalog order."""
        store = {
            "coefficients": self._coefficients,
            "ladders": self._ladders,
            "curves": self._curves,
            "bands": self._bands,
            "records": self._records,
        }[kind]
        return tuple(k for (c, k) in store if c == category)

    @staticmethod
    def _get(store, kind: str, category: str, key: str):
        try:
            return store[(category, key)]
        except KeyError:
            raise StandardsLookupError(f"No {kind} for {category}/{key}") from None


def _iter_rows(section: Optional[Mapping[str, Any]]):
    for category, rows in (section or {}).items():
        for key, raw in (rows or {}).items():
            yield str(category), str(key), raw
