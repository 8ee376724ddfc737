from __future__ import annotations

import enum
import logging
import math
import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from outfile_viewer.ingest.errors import IngestCancelled, NoDataRows, NoHeaderFound
from outfile_viewer.ingest.line_stream import LineStreamReader, read_lines
from outfile_viewer.models.catalog import source_id_for
from outfile_viewer.models.frames import TIME_COLUMN, ParsedTable
from outfile_viewer.models.profile import OutReaderConfig


logger = logging.getLogger(__name__)


_NUMBER = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_sample(token: str) -> Optional[float]:
    """
    Parse one whitespace-free token into a finite float, or None.

    Only plain ASCII decimal notation is accepted (``1``, ``-2.5``, ``.5``, ``1e-3``);
    Python-only spellings such as ``1_000`` or non-ASCII digits are not numbers here.
    """
    if not isinstance(token, str) or not _NUMBER.fullmatch(token):
        return None
    try:
        v = float(token)
    except ValueError:
        return None
    if not math.isfinite(v):
        return None
    return v


class ParseState(enum.Enum):
    SEEKING_HEADER = "seeking_header"
    SEEKING_UNITS = "seeking_units"
    READING_DATA = "reading_data"


def _dedupe_names(names: List[str]) -> Tuple[List[str], List[str]]:
    """Make header names distinct by suffixing ``.1``, ``.2``, ... to repeats."""
    seen: Dict[str, int] = {}
    taken = set(names)
    out: List[str] = []
    renamed: List[str] = []
    for name in names:
        if name not in seen:
            seen[name] = 0
            out.append(name)
            continue
        k = seen[name]
        while True:
            k += 1
            cand = f"{name}.{k}"
            if cand not in taken:
                break
        seen[name] = k
        taken.add(cand)
        out.append(cand)
        renamed.append(f"{name} -> {cand}")
    return out, renamed


class OutFileParser:
    """
    Parser for the ``*.out`` text layout:

        <optional blank / preamble lines>
        Time  Param1  Param2  ...
        s     unit1   unit2   ...
        <t0>  <v0_1>  <v0_2>  ...

    The parse is a three-state machine (SEEKING_HEADER -> SEEKING_UNITS -> READING_DATA),
    each state visited once, in order.

    HARD REQUIREMENTS:
      - time is always taken from the file (the ``Time`` column)
      - a data row is kept only if its token count equals the header arity and its time
        token parses; other bad tokens become NaN in that row
      - no partial table is ever returned: the file either yields a complete ParsedTable
        or raises NoHeaderFound / NoDataRows / IngestCancelled
    """

    def __init__(self, config: Optional[OutReaderConfig] = None):
        self.config = config or OutReaderConfig()
        self._header_re = re.compile(rf"\b{re.escape(self.config.time_token)}\b")

    def parse(
        self,
        lines: Iterable[str],
        *,
        source_id: str = "",
        cancel: Optional[Callable[[], bool]] = None,
    ) -> ParsedTable:
        state = ParseState.SEEKING_HEADER

        names: List[str] = []
        time_idx = 0
        n_cols = 0
        units: Dict[str, str] = {}
        time_unit = ""
        data: List[List[float]] = []
        warnings: List[str] = []

        n_malformed = 0
        n_bad_time = 0
        n_null = 0

        for line in lines:
            if cancel is not None and cancel():
                raise IngestCancelled(f"ingestion cancelled: {source_id or '<stream>'}", source_id)

            trimmed = line.strip()

            if state is ParseState.SEEKING_HEADER:
                if not trimmed or not self._header_re.search(trimmed):
                    continue
                raw_names = trimmed.split()
                time_idx = next((i for i, tok in enumerate(raw_names) if self._header_re.search(tok)), None)
                if time_idx is None:
                    continue
                if raw_names[time_idx] != TIME_COLUMN:
                    warnings.append(f"time column header '{raw_names[time_idx]}' read as '{TIME_COLUMN}'")
                raw_names[time_idx] = TIME_COLUMN
                names, renamed = _dedupe_names(raw_names)
                if renamed:
                    warnings.append("renamed duplicate headers: " + ", ".join(renamed))
                n_cols = len(names)
                data = [[] for _ in range(n_cols)]
                state = ParseState.SEEKING_UNITS
                continue

            if state is ParseState.SEEKING_UNITS:
                # The units row is the line right after the header, even when blank.
                tokens = trimmed.split()
                for i, name in enumerate(names):
                    u = tokens[i] if i < len(tokens) else ""
                    if i == time_idx:
                        time_unit = u
                    else:
                        units[name] = u
                state = ParseState.READING_DATA
                continue

            if not trimmed:
                continue
            tokens = trimmed.split()
            if len(tokens) != n_cols:
                n_malformed += 1
                continue
            t = parse_sample(tokens[time_idx])
            if t is None:
                n_bad_time += 1
                continue
            for i, tok in enumerate(tokens):
                if i == time_idx:
                    data[i].append(t)
                    continue
                v = parse_sample(tok)
                if v is None:
                    n_null += 1
                    data[i].append(math.nan)
                else:
                    data[i].append(v)

        if state is ParseState.SEEKING_HEADER:
            raise NoHeaderFound(
                f"no header row containing '{self.config.time_token}': {source_id or '<stream>'}",
                source_id,
            )

        if not data or not data[time_idx]:
            raise NoDataRows(f"header found but no valid data rows: {source_id or '<stream>'}", source_id)

        if n_malformed:
            warnings.append(f"skipped {n_malformed} malformed rows (token count != {n_cols})")
        if n_bad_time:
            warnings.append(f"skipped {n_bad_time} rows with unparsable time")
        if n_null:
            warnings.append(f"{n_null} unparsable samples stored as NaN")

        columns = {name: np.asarray(col, dtype=np.float64) for name, col in zip(names, data)}
        headers = tuple(name for i, name in enumerate(names) if i != time_idx)

        table = ParsedTable(
            headers=headers,
            units=units,
            columns=columns,
            source_id=source_id,
            time_unit=time_unit,
            warnings=tuple(warnings),
        )
        logger.debug(
            "parsed %s: %d rows, %d columns, malformed=%d bad_time=%d null=%d",
            source_id or "<stream>", table.n_rows, len(headers), n_malformed, n_bad_time, n_null,
        )
        return table

    def parse_chunks(
        self,
        chunks: Iterable[bytes],
        *,
        source_id: str = "",
        cancel: Optional[Callable[[], bool]] = None,
    ) -> ParsedTable:
        """Parse an incrementally arriving byte stream."""
        cfg = self.config
        lines = LineStreamReader(chunks, encoding=cfg.encoding, errors=cfg.decode_errors)
        return self.parse(lines, source_id=source_id, cancel=cancel)


class OutFileReader:
    """Reads one ``*.out`` file from disk by streaming it through OutFileParser."""

    def __init__(self, config: Optional[OutReaderConfig] = None):
        self.config = config or OutReaderConfig()
        self._parser = OutFileParser(self.config)

    def read(
        self,
        file_path: str | Path,
        *,
        source_id: Optional[str] = None,
        cancel: Optional[Callable[[], bool]] = None,
    ) -> ParsedTable:
        path = Path(file_path).expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(str(path))
        if source_id is None:
            source_id = source_id_for(path.name, path.stat().st_mtime_ns // 1_000_000)

        cfg = self.config
        lines = read_lines(path, chunk_size=cfg.chunk_size, encoding=cfg.encoding, errors=cfg.decode_errors)
        return self._parser.parse(lines, source_id=source_id, cancel=cancel)
