from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


OUT_SUFFIX = ".out"


def is_out_file(name: str) -> bool:
    """File acceptance filter: only ``*.out`` files (any case) are parsed."""
    return str(name).lower().endswith(OUT_SUFFIX)


def source_id_for(name: str, mtime_ms: int) -> str:
    """Identity of one file version: ``{relative-path-or-name}_{mtime_ms}``."""
    return f"{name}_{int(mtime_ms)}"


@dataclass(frozen=True)
class FileVersion:
    """
    One on-disk version of a ``*.out`` file.

    file_key: stable identifier grouping all versions of "the same" file (its name).
    relative_path: path relative to the scanned folder (including the folder name),
                   or None when the file was added directly.
    mtime_ms: modification time in integer milliseconds.
    """
    path: Path
    file_key: str
    mtime_ms: int
    relative_path: Optional[str] = None

    @property
    def source_id(self) -> str:
        return source_id_for(self.relative_path or self.file_key, self.mtime_ms)

    @property
    def upload_id(self) -> str:
        # Identity used when the file is added to the catalog (name only, no folder).
        return source_id_for(self.file_key, self.mtime_ms)


@dataclass
class FileCatalog:
    """
    Filesystem-independent list of the ``*.out`` versions offered to the viewer.

    Notes
    - versions are keyed by file name, so the same file exported twice (or found in two
      folders) becomes two versions of one key.
    - a version with the same name and modification time as an existing one is ignored.
    """
    files: Dict[str, List[FileVersion]] = field(default_factory=dict)

    def add(self, version: FileVersion) -> bool:
        if not is_out_file(version.file_key):
            return False
        existing = self.files.setdefault(version.file_key, [])
        if any(v.upload_id == version.upload_id for v in existing):
            return False
        existing.append(version)
        return True

    def keys(self) -> List[str]:
        return list(self.files.keys())

    def versions(self, file_key: str) -> List[FileVersion]:
        return list(self.files.get(file_key, []))

    def __contains__(self, file_key: object) -> bool:
        return file_key in self.files

    def __len__(self) -> int:
        return len(self.files)
