"""Viewer profile -- bundles every tunable that affects ingestion and plotting.

A ViewerProfile groups the reader configuration, the downsample budget and the
colour palette into one frozen dataclass.  It can be:

- Overridden field-by-field via ``dataclasses.replace()``
- Serialized to/from a dict for JSON settings files
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple


DEFAULT_THRESHOLD = 2000

DEFAULT_PALETTE: Tuple[str, ...] = (
    "#2563eb", "#dc2626", "#16a34a", "#7c3aed",
    "#ea580c", "#0891b2", "#ca8a04", "#db2777",
    "#65a30d", "#0f766e", "#9333ea", "#be123c",
)


@dataclass(frozen=True)
class OutReaderConfig:
    """
    Reader configuration for ``*.out`` text files.

    encoding / decode_errors:
      Passed to the incremental decoder. ``"replace"`` turns invalid byte sequences
      into U+FFFD instead of aborting the file.
    chunk_size:
      Bytes read per chunk when streaming from disk.
    time_token:
      Whole-word token identifying the header row and the time column.
    """
    encoding: str = "utf-8"
    decode_errors: str = "replace"
    chunk_size: int = 64 * 1024
    time_token: str = "Time"

    def __post_init__(self) -> None:
        if int(self.chunk_size) <= 0:
            raise ValueError("chunk_size must be > 0")
        # header tokens are whitespace-split, so the time token must be one of them
        if len(str(self.time_token).split()) != 1 or str(self.time_token) != str(self.time_token).strip():
            raise ValueError(f"time_token must be a single word without whitespace: {self.time_token!r}")


@dataclass(frozen=True)
class ViewerProfile:
    """Frozen configuration for the viewer session.

    Fields
    ------
    downsample_threshold : int
        Maximum points per series after LTTB (0 disables downsampling).
    palette : tuple of str
        Colours handed out per file key, cycled when exhausted.
    max_workers : int or None
        Thread pool size for batch ingestion (None lets the executor decide).
    reader : OutReaderConfig
        Parser and streaming settings.
    """

    downsample_threshold: int = DEFAULT_THRESHOLD
    palette: Tuple[str, ...] = DEFAULT_PALETTE
    max_workers: Optional[int] = None
    reader: OutReaderConfig = field(default_factory=OutReaderConfig)

    def __post_init__(self) -> None:
        if int(self.downsample_threshold) < 0:
            raise ValueError("downsample_threshold must be >= 0")
        if not self.palette:
            raise ValueError("palette must contain at least one colour")
        if self.max_workers is not None and int(self.max_workers) <= 0:
            raise ValueError("max_workers must be > 0 (or None)")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict (tuples become lists)."""
        d = asdict(self)
        d["palette"] = list(d["palette"])
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ViewerProfile:
        """Reconstruct from a dict (e.g. loaded from JSON)."""
        d = dict(d)  # shallow copy
        if "palette" in d and not isinstance(d["palette"], tuple):
            d["palette"] = tuple(d["palette"])
        if isinstance(d.get("reader"), dict):
            d["reader"] = OutReaderConfig(**d["reader"])
        return cls(**d)
