"""Tests for colour assignment, stack assembly and wildcard search."""

from __future__ import annotations

from typing import Dict

import numpy as np
import pytest

from outfile_viewer.analysis.series import (
    ColorAssigner,
    assemble_stacks,
    filter_names,
    trace_id,
    trace_name,
    wildcard_to_regex,
)
from outfile_viewer.models.frames import DownsampledSeries, IngestedVersion


def _version(file_key: str, source_id: str, data: Dict[str, list]) -> IngestedVersion:
    series = {}
    for name, ys in data.items():
        xs = np.arange(len(ys), dtype=float)
        series[name] = DownsampledSeries(xs=xs, ys=np.asarray(ys, dtype=float), n_source=len(ys))
    return IngestedVersion(
        file_key=file_key,
        source_id=source_id,
        headers=tuple(data),
        units={name: "" for name in data},
        series=series,
        n_rows=max((len(v) for v in data.values()), default=0),
    )


# -----------------------------------------------------------------------
# ColorAssigner
# -----------------------------------------------------------------------


def test_colors_unique_until_palette_exhausted_then_cycle() -> None:
    c = ColorAssigner(("#111111", "#222222", "#333333"))
    got = [c.color_for(k) for k in ("a", "b", "c")]
    assert got == ["#111111", "#222222", "#333333"]
    assert c.color_for("d") == "#111111"
    assert c.color_for("e") == "#222222"


def test_color_is_stable_per_key() -> None:
    c = ColorAssigner()
    first = c.color_for("run.out")
    c.color_for("other.out")
    assert c.color_for("run.out") == first
    assert "run.out" in c
    assert c.assignments() == {"run.out": first, "other.out": c.palette[1]}


def test_color_reset() -> None:
    c = ColorAssigner(("#a", "#b"))
    c.color_for("x")
    c.reset()
    assert "x" not in c
    assert c.color_for("y") == "#a"


def test_empty_palette_rejected() -> None:
    with pytest.raises(ValueError):
        ColorAssigner(())


# -----------------------------------------------------------------------
# Naming
# -----------------------------------------------------------------------


def test_trace_id_and_name() -> None:
    assert trace_id("run.out", 1, "Speed") == "run.out__1__Speed"
    assert trace_name("run.out", 0, 1) == "run.out"
    assert trace_name("run.out", 1, 3) == "run.out (2)"


# -----------------------------------------------------------------------
# assemble_stacks
# -----------------------------------------------------------------------


def _versions():
    return {
        "a.out": [
            _version("a.out", "a.out_1", {"A": [1, 2], "B": [3, 4]}),
            _version("a.out", "a.out_2", {"A": [5, 6]}),
        ],
        "b.out": [_version("b.out", "b.out_1", {"A": [7, 8, 9]})],
    }


def test_one_stack_per_selected_parameter_in_selection_order() -> None:
    stacks = assemble_stacks(["a.out", "b.out"], ["B", "A"], _versions(), ColorAssigner())
    assert [s.parameter_name for s in stacks] == ["B", "A"]


def test_traces_per_file_and_version() -> None:
    colors = ColorAssigner(("#a", "#b", "#c"))
    stacks = assemble_stacks(["a.out", "b.out"], ["A"], _versions(), colors)
    traces = stacks[0].traces
    assert [t.id for t in traces] == ["a.out__0__A", "a.out__1__A", "b.out__0__A"]
    assert [t.name for t in traces] == ["a.out (1)", "a.out (2)", "b.out"]
    assert [t.color for t in traces] == ["#a", "#a", "#b"]
    assert [(p.time, p.value) for p in traces[2].points] == [(0.0, 7.0), (1.0, 8.0), (2.0, 9.0)]


def test_missing_data_is_omitted() -> None:
    stacks = assemble_stacks(["a.out", "b.out"], ["B", "Z"], _versions(), ColorAssigner())
    assert [t.id for t in stacks[0].traces] == ["a.out__0__B"]
    assert stacks[1].traces == ()


def test_inactive_files_contribute_nothing() -> None:
    stacks = assemble_stacks(["b.out"], ["A"], _versions(), ColorAssigner())
    assert [t.id for t in stacks[0].traces] == ["b.out__0__A"]
    assert assemble_stacks(["missing.out"], ["A"], _versions(), ColorAssigner())[0].traces == ()


def test_visibility_and_units_are_applied() -> None:
    stacks = assemble_stacks(
        ["a.out"],
        ["A"],
        _versions(),
        ColorAssigner(),
        visibility={"a.out__1__A": False},
        units={"A": "V"},
    )
    assert [t.visible for t in stacks[0].traces] == [True, False]
    assert stacks[0].unit == "V"


def test_colors_survive_recomputation() -> None:
    colors = ColorAssigner(("#a", "#b"))
    assemble_stacks(["b.out"], ["A"], _versions(), colors)
    stacks = assemble_stacks(["a.out", "b.out"], ["A"], _versions(), colors)
    by_key = {t.id.split("__")[0]: t.color for t in stacks[0].traces}
    assert by_key == {"b.out": "#a", "a.out": "#b"}


def test_stack_to_dict_shape() -> None:
    stack = assemble_stacks(["b.out"], ["A"], _versions(), ColorAssigner(("#a",)))[0]
    d = stack.to_dict()
    assert d["parameter_name"] == "A"
    assert d["traces"][0] == {
        "id": "b.out__0__A",
        "name": "b.out",
        "color": "#a",
        "points": [{"time": 0.0, "value": 7.0}, {"time": 1.0, "value": 8.0}, {"time": 2.0, "value": 9.0}],
        "visible": True,
    }


# -----------------------------------------------------------------------
# Wildcard search
# -----------------------------------------------------------------------


NAMES = ["Speed", "Torque_1", "torque_2", "Temp", "a.b", "axb"]


def test_wildcard_matches_any_run() -> None:
    assert filter_names(NAMES, "tor*") == ["Torque_1", "torque_2"]
    assert filter_names(NAMES, "T*p") == ["Temp"]


def test_plain_pattern_is_case_insensitive_substring() -> None:
    assert filter_names(NAMES, "QUE") == ["Torque_1", "torque_2"]


def test_regex_metacharacters_are_literal() -> None:
    assert filter_names(NAMES, "a.b") == ["a.b"]
    assert wildcard_to_regex("(x").search("a(x)") is not None


def test_empty_pattern_matches_all() -> None:
    assert filter_names(NAMES, "") == NAMES
    assert filter_names(NAMES, None) == NAMES
