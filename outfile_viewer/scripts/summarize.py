"""
Command-line summary of ``*.out`` files.

Scans the given files and folders, ingests every ``*.out`` version found, and
prints one line per version (rows, parameters, warnings) plus the structural
failures.  Optionally writes the downsampled series to CSV, one file per
version, with ``Time`` and every downsampled parameter.

Examples
--------
    python -m outfile_viewer.scripts.summarize runs/
    python -m outfile_viewer.scripts.summarize runs/ --threshold 500 --export-dir out_csv
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from outfile_viewer.analysis.session import PlotSession
from outfile_viewer.models.frames import TIME_COLUMN, IngestedVersion
from outfile_viewer.models.profile import ViewerProfile


def series_frame(version: IngestedVersion) -> pd.DataFrame:
    """
    Downsampled series of one version as a long DataFrame.

    Columns: parameter, Time, value.  LTTB keeps different samples per parameter,
    so the series do not share a time axis and are stacked instead of joined.
    """
    parts = []
    for param, s in version.series.items():
        parts.append(pd.DataFrame({"parameter": param, TIME_COLUMN: s.xs, "value": s.ys}))
    if not parts:
        return pd.DataFrame(columns=["parameter", TIME_COLUMN, "value"])
    return pd.concat(parts, ignore_index=True)


def _safe_name(source_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]+", "_", source_id).strip("_") or "series"


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="python -m outfile_viewer.scripts.summarize",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Ingest *.out files and print a per-file summary.

            Folders are scanned recursively; files not ending in .out are ignored.
            """
        ),
    )
    p.add_argument("paths", nargs="+", help="Files and/or folders to scan")
    p.add_argument("--threshold", type=int, default=None, help="Points per series after LTTB (0 = keep all)")
    p.add_argument("--workers", type=int, default=None, help="Parallel ingestion threads")
    p.add_argument("--export-dir", default=None, help="Write downsampled series as CSV into this folder")
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-file diagnostics")

    ns = p.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=logging.DEBUG if ns.verbose else logging.WARNING, format="[%(levelname)s] %(message)s")

    profile = ViewerProfile()
    if ns.threshold is not None:
        profile = ViewerProfile(downsample_threshold=ns.threshold, max_workers=ns.workers)
    elif ns.workers is not None:
        profile = ViewerProfile(max_workers=ns.workers)

    session = PlotSession(profile=profile)
    versions = session.add_paths(ns.paths)
    if not versions:
        print("No *.out files found.")
        return 1

    session.ingest_many(versions)

    for key in session.catalog.keys():
        for v in session.versions.get(key, []):
            n_pts = max((len(s) for s in v.series.values()), default=0)
            print(f"[{key}] {v.source_id}: rows={v.n_rows}, parameters={len(v.headers)}, points/series<={n_pts}")
            for msg in v.warnings:
                print(f"  CHECK: {msg}")

    for sid, msg in session.failures.items():
        print(f"[failed] {sid}: {msg}")

    if ns.export_dir:
        out_dir = Path(ns.export_dir).expanduser()
        out_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        for versions_of_key in session.versions.values():
            for v in versions_of_key:
                path = out_dir / f"{_safe_name(v.source_id)}.csv"
                series_frame(v).to_csv(path, index=False)
                written.append(path)
        print(f"wrote {len(written)} CSV file(s) to {out_dir}")

    return 0 if not session.failures else 2


if __name__ == "__main__":
    raise SystemExit(main())
