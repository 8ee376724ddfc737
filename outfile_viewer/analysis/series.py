"""Series assembly: turn ingested file versions into stacked, coloured traces.

``assemble_stacks`` is a pure function of its inputs.  Colours come from an
explicit :class:`ColorAssigner` owned by the caller, so the same file key keeps
its colour across recomputations and two keys never share a colour until the
palette is exhausted.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from outfile_viewer.models.frames import IngestedVersion
from outfile_viewer.models.profile import DEFAULT_PALETTE
from outfile_viewer.models.traces import Point, Stack, Trace


class ColorAssigner:
    """Hands out palette colours per file key, in first-seen order, cycling when exhausted."""

    def __init__(self, palette: Sequence[str] = DEFAULT_PALETTE) -> None:
        if not palette:
            raise ValueError("palette must contain at least one colour")
        self.palette = tuple(palette)
        self._index: Dict[str, int] = {}

    def color_for(self, file_key: str) -> str:
        idx = self._index.get(file_key)
        if idx is None:
            idx = len(self._index)
            self._index[file_key] = idx
        return self.palette[idx % len(self.palette)]

    def assignments(self) -> Dict[str, str]:
        return {k: self.palette[i % len(self.palette)] for k, i in self._index.items()}

    def reset(self) -> None:
        self._index.clear()

    def __contains__(self, file_key: object) -> bool:
        return file_key in self._index


def trace_id(file_key: str, version_index: int, parameter: str) -> str:
    return f"{file_key}__{int(version_index)}__{parameter}"


def trace_name(file_key: str, version_index: int, n_versions: int) -> str:
    if n_versions > 1:
        return f"{file_key} ({int(version_index) + 1})"
    return file_key


def assemble_stacks(
    active_file_keys: Sequence[str],
    selected_parameters: Sequence[str],
    versions_by_key: Mapping[str, Sequence[IngestedVersion]],
    colors: ColorAssigner,
    *,
    visibility: Optional[Mapping[str, bool]] = None,
    units: Optional[Mapping[str, str]] = None,
) -> List[Stack]:
    """
    Build one Stack per selected parameter (selection order).

    Each stack holds one Trace per (active file key, version) that has data for the
    parameter, ordered by active key then by version.  Missing data is skipped.
    """
    visibility = visibility or {}
    units = units or {}

    stacks: List[Stack] = []
    for param in selected_parameters:
        traces: List[Trace] = []
        for file_key in active_file_keys:
            versions = versions_by_key.get(file_key) or ()
            for idx, version in enumerate(versions):
                series = version.series.get(param)
                if series is None or len(series) == 0:
                    continue
                tid = trace_id(file_key, idx, param)
                traces.append(
                    Trace(
                        id=tid,
                        name=trace_name(file_key, idx, len(versions)),
                        color=colors.color_for(file_key),
                        points=tuple(Point(t, v) for t, v in series.points()),
                        visible=bool(visibility.get(tid, True)),
                    )
                )
        stacks.append(Stack(parameter_name=param, traces=tuple(traces), unit=units.get(param, "")))
    return stacks


# ---------------------------------------------------------------------------
# Search helpers
# ---------------------------------------------------------------------------


def wildcard_to_regex(pattern: str) -> "re.Pattern[str]":
    """
    Compile a search box pattern.

    ``*`` matches any run of characters; a pattern without ``*`` matches as a
    substring.  Matching is case-insensitive and unanchored; every other character
    is literal.
    """
    parts = [re.escape(p) for p in str(pattern).split("*")]
    return re.compile(".*".join(parts), flags=re.IGNORECASE)


def filter_names(names: Iterable[str], pattern: Optional[str]) -> List[str]:
    """Keep the names matching ``pattern`` (all of them when it is empty or invalid)."""
    names = list(names)
    if not pattern:
        return names
    try:
        rx = wildcard_to_regex(pattern)
    except re.error:
        return names
    return [n for n in names if rx.search(n)]
