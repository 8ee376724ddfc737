from .catalog import FileCatalog, FileVersion, is_out_file, source_id_for
from .frames import DownsampledSeries, IngestedVersion, ParsedTable, TIME_COLUMN
from .profile import DEFAULT_PALETTE, DEFAULT_THRESHOLD, OutReaderConfig, ViewerProfile
from .traces import Point, Stack, Trace

__all__ = [
    "FileCatalog",
    "FileVersion",
    "is_out_file",
    "source_id_for",
    "DownsampledSeries",
    "IngestedVersion",
    "ParsedTable",
    "TIME_COLUMN",
    "DEFAULT_PALETTE",
    "DEFAULT_THRESHOLD",
    "OutReaderConfig",
    "ViewerProfile",
    "Point",
    "Stack",
    "Trace",
]
