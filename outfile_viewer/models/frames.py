from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple

import numpy as np
import pandas as pd


TIME_COLUMN = "Time"


@dataclass(frozen=True)
class ParsedTable:
    """
    In-memory representation of one ``*.out`` file version after parsing.

    Notes
    - 'Time' is always the time column taken from the file (no synthetic time generation).
    - ``headers`` lists the plotted columns only; 'Time' is structural and excluded,
      but its samples are present in ``columns``.
    - every array in ``columns`` is float64 with the same length; missing samples are NaN.
    """
    headers: Tuple[str, ...]
    units: Dict[str, str]
    columns: Dict[str, np.ndarray]
    source_id: str = ""
    time_unit: str = ""
    warnings: Tuple[str, ...] = ()

    @property
    def all_headers(self) -> Tuple[str, ...]:
        return (TIME_COLUMN,) + tuple(self.headers)

    @property
    def time(self) -> np.ndarray:
        return self.columns[TIME_COLUMN]

    @property
    def n_rows(self) -> int:
        return int(len(self.columns[TIME_COLUMN]))

    def to_dataframe(self) -> pd.DataFrame:
        """Return all columns as a DataFrame, 'Time' first."""
        return pd.DataFrame({h: self.columns[h] for h in self.all_headers})


@dataclass(frozen=True)
class DownsampledSeries:
    """
    Output of the downsampler for one (file version, column) pair.

    ``xs`` and ``ys`` are equal-length float64 arrays. ``n_source`` is the
    number of samples before downsampling.
    """
    xs: np.ndarray
    ys: np.ndarray
    n_source: int = 0

    def __len__(self) -> int:
        return int(len(self.xs))

    @property
    def is_reduced(self) -> bool:
        return len(self) < self.n_source

    def points(self) -> Iterator[Tuple[float, float]]:
        for t, v in zip(self.xs.tolist(), self.ys.tolist()):
            yield float(t), float(v)


@dataclass(frozen=True)
class IngestedVersion:
    """One successfully parsed and downsampled file version, as kept by the session."""
    file_key: str
    source_id: str
    headers: Tuple[str, ...]
    units: Dict[str, str]
    series: Dict[str, DownsampledSeries]
    n_rows: int
    time_unit: str = ""
    warnings: Tuple[str, ...] = field(default=())
