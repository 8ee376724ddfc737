from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from outfile_viewer.analysis.lttb import downsample_table
from outfile_viewer.analysis.series import ColorAssigner, assemble_stacks, filter_names
from outfile_viewer.ingest.discovery import OutFileDiscovery
from outfile_viewer.ingest.errors import IngestCancelled
from outfile_viewer.ingest.readers_out import OutFileReader
from outfile_viewer.models.catalog import FileCatalog, FileVersion
from outfile_viewer.models.frames import IngestedVersion
from outfile_viewer.models.profile import ViewerProfile
from outfile_viewer.models.traces import Stack


logger = logging.getLogger(__name__)


class PlotSession:
    """
    Viewer state for one session: offered files, ingested versions, selections.

    Parsing and downsampling run per file without shared state (``build_version``);
    everything that mutates the session goes through ``_merge`` / ``_record_failure``
    under a lock, once per completed file.

    A file that fails structurally is logged and listed in ``failures``; it never
    stops other files from being ingested.
    """

    def __init__(
        self,
        catalog: Optional[FileCatalog] = None,
        profile: Optional[ViewerProfile] = None,
        colors: Optional[ColorAssigner] = None,
    ) -> None:
        self.profile = profile or ViewerProfile()
        self.catalog = catalog if catalog is not None else FileCatalog()
        self.colors = colors or ColorAssigner(self.profile.palette)
        self._reader = OutFileReader(self.profile.reader)
        self._lock = threading.Lock()

        self.versions: Dict[str, List[IngestedVersion]] = {}
        self.failures: Dict[str, str] = {}
        self.available_parameters: List[str] = []
        self.column_units: Dict[str, str] = {}

        self.active_file_keys: List[str] = []
        self.selected_parameters: List[str] = []
        self.visibility: Dict[str, bool] = {}

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def add_paths(self, paths: Iterable[str | Path]) -> List[FileVersion]:
        """Offer files and/or folders to the session; only ``*.out`` files are kept."""
        disc = OutFileDiscovery(catalog=self.catalog)
        added = disc.add(paths)
        for msg in disc.warnings:
            logger.info(msg)
        logger.info("added %d file version(s); %d file key(s) offered", len(added), len(self.catalog))
        return added

    def is_ingested(self, file_key: str, source_id: str) -> bool:
        return any(v.source_id == source_id for v in self.versions.get(file_key, ()))

    def build_version(
        self,
        version: FileVersion,
        cancel: Optional[Callable[[], bool]] = None,
    ) -> IngestedVersion:
        """Parse and downsample one file version. Pure with respect to the session."""
        table = self._reader.read(version.path, source_id=version.source_id, cancel=cancel)
        series = downsample_table(table, self.profile.downsample_threshold)
        return IngestedVersion(
            file_key=version.file_key,
            source_id=table.source_id,
            headers=table.headers,
            units=dict(table.units),
            series=series,
            n_rows=table.n_rows,
            time_unit=table.time_unit,
            warnings=table.warnings,
        )

    def ingest_version(
        self,
        version: FileVersion,
        cancel: Optional[Callable[[], bool]] = None,
    ) -> Optional[IngestedVersion]:
        """Ingest one version unless an identical one is already loaded."""
        if self.is_ingested(version.file_key, version.source_id):
            logger.debug("already ingested: %s", version.source_id)
            return None
        try:
            built = self.build_version(version, cancel=cancel)
        except IngestCancelled:
            logger.info("ingestion cancelled: %s", version.source_id)
            return None
        except (ValueError, OSError) as exc:
            self._record_failure(version, exc)
            return None
        return self._merge(built)

    def ingest_many(
        self,
        versions: Iterable[FileVersion],
        *,
        max_workers: Optional[int] = None,
        cancel: Optional[Callable[[], bool]] = None,
    ) -> List[IngestedVersion]:
        """
        Ingest several versions concurrently (one task per file).

        Results are merged on the calling thread in the order the versions were given,
        so version indices do not depend on which file finished first.
        """
        pending: List[FileVersion] = []
        seen = set()
        for v in versions:
            if v.source_id in seen or self.is_ingested(v.file_key, v.source_id):
                continue
            seen.add(v.source_id)
            pending.append(v)
        if not pending:
            return []

        workers = max_workers or self.profile.max_workers
        merged: List[IngestedVersion] = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(v, executor.submit(self.build_version, v, cancel)) for v in pending]
            for v, fut in futures:
                try:
                    built = fut.result()
                except IngestCancelled:
                    logger.info("ingestion cancelled: %s", v.source_id)
                    continue
                except (ValueError, OSError) as exc:
                    self._record_failure(v, exc)
                    continue
                result = self._merge(built)
                if result is not None:
                    merged.append(result)
        return merged

    def _merge(self, built: IngestedVersion) -> Optional[IngestedVersion]:
        with self._lock:
            existing = self.versions.setdefault(built.file_key, [])
            if any(v.source_id == built.source_id for v in existing):
                return None
            existing.append(built)
            for h in built.headers:
                if h not in self.available_parameters:
                    self.available_parameters.append(h)
            self.column_units.update(built.units)
            self.failures.pop(built.source_id, None)
        logger.info(
            "ingested %s: %d rows, %d parameters",
            built.source_id, built.n_rows, len(built.headers),
        )
        for msg in built.warnings:
            logger.debug("%s: %s", built.source_id, msg)
        return built

    def _record_failure(self, version: FileVersion, exc: Exception) -> None:
        with self._lock:
            self.failures[version.source_id] = f"{type(exc).__name__}: {exc}"
        logger.warning("could not ingest %s (%s: %s)", version.source_id, type(exc).__name__, exc)

    # ------------------------------------------------------------------
    # Selections
    # ------------------------------------------------------------------

    def set_file_active(self, file_key: str, active: bool) -> bool:
        """Activate (and ingest all versions of) a file key, or deactivate it. Idempotent; returns the state."""
        if not active:
            if file_key in self.active_file_keys:
                self.active_file_keys.remove(file_key)
            return False
        if file_key not in self.active_file_keys:
            self.active_file_keys.append(file_key)
            self.ingest_many(self.catalog.versions(file_key))
        return True

    def toggle_file(self, file_key: str) -> bool:
        return self.set_file_active(file_key, file_key not in self.active_file_keys)

    def set_parameter_selected(self, name: str, selected: bool) -> bool:
        if not selected:
            if name in self.selected_parameters:
                self.selected_parameters.remove(name)
            return False
        if name not in self.selected_parameters:
            self.selected_parameters.append(name)
        return True

    def toggle_parameter(self, name: str) -> bool:
        return self.set_parameter_selected(name, name not in self.selected_parameters)

    def set_visible(self, trace_id: str, visible: bool) -> None:
        self.visibility[trace_id] = bool(visible)

    # Renderer callback name used by the legend widgets.
    on_legend_toggle = set_visible

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def stacks(self) -> List[Stack]:
        return assemble_stacks(
            self.active_file_keys,
            self.selected_parameters,
            self.versions,
            self.colors,
            visibility=self.visibility,
            units=self.column_units,
        )

    def filtered_file_keys(self, pattern: Optional[str] = None) -> List[str]:
        return filter_names(self.catalog.keys(), pattern)

    def filtered_parameters(self, pattern: Optional[str] = None) -> List[str]:
        return filter_names(self.available_parameters, pattern)
