"""Largest-Triangle-Three-Buckets (LTTB) downsampling.

LTTB keeps the first and last samples and picks exactly one sample per bucket in
between: the one spanning the largest triangle with the previously kept sample
and the centroid of the next bucket.  Only existing samples are returned; nothing
is interpolated.

Bucket boundaries use floored fractional widths,

    bucket i = [floor(1 + i*w), floor(1 + (i+1)*w)),   w = (n - 2) / (threshold - 2)

and centroid sums accumulate left to right, so the selected indices are
reproducible bit for bit across runs and platforms.

NaN handling
------------
Non-finite samples are left out of the next-bucket centroid.  When the next
bucket holds no finite sample, the last point stands in for the centroid (or
the current anchor, if the last point is not finite either).  A NaN candidate
yields a NaN area and never wins its bucket unless the whole bucket is NaN; its
first sample is then kept, but the anchor for the next bucket stays on the last
finite selection.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from outfile_viewer.models.frames import DownsampledSeries, ParsedTable
from outfile_viewer.models.profile import DEFAULT_THRESHOLD


def _as_pair(xs: Sequence[float], ys: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    if x.ndim != 1 or y.ndim != 1:
        raise ValueError("xs and ys must be 1-D")
    if x.shape[0] != y.shape[0]:
        raise ValueError(f"Length mismatch: xs has {x.shape[0]} samples but ys has {y.shape[0]} samples")
    return x, y


def _sequential_mean(v: np.ndarray) -> float:
    # np.cumsum accumulates strictly left to right (np.sum is pairwise).
    return float(np.cumsum(v)[-1]) / v.shape[0]


def lttb_indices(xs: Sequence[float], ys: Sequence[float], threshold: int) -> np.ndarray:
    """
    Return the indices of the samples kept by LTTB.

    ``threshold == 0`` or ``threshold >= n`` keeps every index.  For 1 or 2 (below n)
    only the two end points are kept.  Otherwise exactly ``threshold`` indices are
    returned, strictly increasing, starting at 0 and ending at n-1.
    """
    x, y = _as_pair(xs, ys)
    n = int(x.shape[0])
    thr = int(threshold)
    if thr < 0:
        raise ValueError("threshold must be >= 0")

    if thr == 0 or thr >= n:
        return np.arange(n, dtype=np.intp)
    if thr < 3:
        return np.array([0, n - 1], dtype=np.intp)

    bucket_size = (n - 2) / (thr - 2)
    out = np.empty(thr, dtype=np.intp)
    out[0] = 0
    out[-1] = n - 1

    finite = np.isfinite(x) & np.isfinite(y)
    last = (float(x[n - 1]), float(y[n - 1])) if finite[n - 1] else None

    ax, ay = float(x[0]), float(y[0])
    for i in range(thr - 2):
        start = math.floor(1 + i * bucket_size)
        end = math.floor(1 + (i + 1) * bucket_size)
        if end <= start:
            end = start + 1

        next_start = end
        next_end = min(math.floor(1 + (i + 2) * bucket_size), n)
        keep = finite[next_start:next_end]
        if keep.any():
            cx = _sequential_mean(x[next_start:next_end][keep])
            cy = _sequential_mean(y[next_start:next_end][keep])
        elif last is not None:
            cx, cy = last
        else:
            cx, cy = ax, ay

        bx = x[start:end]
        by = y[start:end]
        area = np.abs((ax - cx) * (by - ay) - (ax - bx) * (cy - ay)) * 0.5
        area = np.where(np.isnan(area), -np.inf, area)

        # argmax keeps the first of equal maxima.
        sel = start + int(np.argmax(area))
        out[i + 1] = sel
        if finite[sel]:
            ax, ay = float(x[sel]), float(y[sel])

    return out


def downsample(
    xs: Sequence[float],
    ys: Sequence[float],
    threshold: int = DEFAULT_THRESHOLD,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Reduce ``(xs, ys)`` to at most ``threshold`` points while keeping the visual shape.

    ``xs`` is expected to be sorted ascending; it is not re-sorted.  The function is pure:
    identical inputs always give identical outputs.
    """
    x, y = _as_pair(xs, ys)
    n = int(x.shape[0])
    thr = int(threshold)
    if thr < 0:
        raise ValueError("threshold must be >= 0")
    if thr == 0 or thr >= n:
        # budget already satisfied (or downsampling disabled)
        return x, y
    idx = lttb_indices(x, y, thr)
    return x[idx], y[idx]


def downsample_series(
    xs: Sequence[float],
    ys: Sequence[float],
    threshold: int = DEFAULT_THRESHOLD,
) -> DownsampledSeries:
    x, y = downsample(xs, ys, threshold)
    return DownsampledSeries(xs=x, ys=y, n_source=int(len(xs)))


def downsample_table(
    table: ParsedTable,
    threshold: int = DEFAULT_THRESHOLD,
    *,
    columns: Optional[Sequence[str]] = None,
) -> Dict[str, DownsampledSeries]:
    """Downsample every plotted column of ``table`` against its Time column."""
    t = table.time
    names = table.headers if columns is None else [c for c in columns if c in table.headers]
    out: Dict[str, DownsampledSeries] = {}
    for name in names:
        y = table.columns[name]
        if y.size == 0:
            continue
        out[name] = downsample_series(t, y, threshold)
    return out
