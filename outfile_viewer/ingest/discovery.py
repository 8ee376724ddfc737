from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from outfile_viewer.models.catalog import FileCatalog, FileVersion, is_out_file


def _mtime_ms(path: Path) -> int:
    return int(path.stat().st_mtime_ns // 1_000_000)


def version_from_path(file_path: str | Path, root: Optional[str | Path] = None) -> FileVersion:
    """
    Build a FileVersion for one file.

    When ``root`` is given (the file was found by scanning a folder), the relative
    path is ``"<root-name>/<sub>/<file>"`` so two equally named files in different
    sub-folders get different source ids.
    """
    p = Path(file_path).expanduser().resolve()
    if not p.exists() or not p.is_file():
        raise FileNotFoundError(str(p))

    rel: Optional[str] = None
    if root is not None:
        r = Path(root).expanduser().resolve()
        try:
            rel = (Path(r.name) / p.relative_to(r)).as_posix()
        except ValueError:
            rel = None
    return FileVersion(path=p, file_key=p.name, mtime_ms=_mtime_ms(p), relative_path=rel)


def discover_out_files(selected: str | Path) -> List[Path]:
    """
    Return the ``*.out`` files under ``selected`` (recursive), sorted by path.

    A file path is returned as-is when it passes the acceptance filter.
    """
    p = Path(selected).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(str(p))
    if p.is_file():
        return [p] if is_out_file(p.name) else []
    found = [q for q in p.rglob("*") if q.is_file() and is_out_file(q.name)]
    return sorted(found)


@dataclass
class OutFileDiscovery:
    """
    Collects ``*.out`` versions from a mix of files and folders into a FileCatalog.

    Non-``.out`` paths are ignored silently; they are listed in ``warnings`` only
    when they were named explicitly.
    """
    catalog: FileCatalog = field(default_factory=FileCatalog)
    warnings: List[str] = field(default_factory=list)

    def add(self, paths: Iterable[str | Path]) -> List[FileVersion]:
        added: List[FileVersion] = []
        for raw in paths:
            p = Path(raw).expanduser().resolve()
            if not p.exists():
                self.warnings.append(f"not found: {p}")
                continue
            if p.is_dir():
                versions = [version_from_path(q, root=p) for q in discover_out_files(p)]
            elif is_out_file(p.name):
                versions = [version_from_path(p)]
            else:
                self.warnings.append(f"ignored (not a .out file): {p.name}")
                continue
            for v in versions:
                if self.catalog.add(v):
                    added.append(v)
        return added
