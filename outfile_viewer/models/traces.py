from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Tuple


class Point(NamedTuple):
    time: float
    value: float


@dataclass(frozen=True)
class Trace:
    """A display-ready time series for one (file version, parameter) pair.

    Attributes
    ----------
    id:
        Stable composite ``"<file_key>__<version_index>__<parameter>"``.
    name:
        Legend label; carries a ``" (k)"`` suffix when the file key has several versions.
    color:
        Hex colour assigned per file key.
    points:
        Downsampled ``(time, value)`` pairs. Renderers must treat them as read-only.
    visible:
        Legend visibility. Renderers report toggles back to the session instead of
        mutating the trace.
    """

    id: str
    name: str
    color: str
    points: Tuple[Point, ...]
    visible: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "points": [{"time": p.time, "value": p.value} for p in self.points],
            "visible": self.visible,
        }


@dataclass(frozen=True)
class Stack:
    """All traces contributed by the active files for one parameter."""

    parameter_name: str
    traces: Tuple[Trace, ...] = ()
    unit: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter_name": self.parameter_name,
            "traces": [t.to_dict() for t in self.traces],
        }
