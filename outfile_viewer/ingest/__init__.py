"""Ingest package - streaming readers, ``*.out`` parsing and file discovery.

This package handles:
- Turning a byte stream into lines regardless of chunk boundaries
- Parsing the header / units / data layout of ``*.out`` files
- Discovering ``*.out`` files in folders and grouping versions by file name

Key classes:
- LineStreamReader: pull-based line iterator over byte chunks
- OutFileParser: state-machine parser producing ParsedTable objects
- OutFileReader: streams a file from disk through the parser
- OutFileDiscovery: scans files/folders into a FileCatalog

Design principle:
- Readers produce complete ParsedTable objects or raise a structural error
- Row-level problems are counted, never raised
- No synthetic time is created during ingestion
"""

from .errors import IngestCancelled, NoDataRows, NoHeaderFound, OutFileError
from .line_stream import LineStreamReader, iter_file_chunks, read_lines
from .readers_out import OutFileParser, OutFileReader, ParseState, parse_sample
from .discovery import OutFileDiscovery, discover_out_files, version_from_path

__all__ = [
    "IngestCancelled",
    "NoDataRows",
    "NoHeaderFound",
    "OutFileError",
    "LineStreamReader",
    "iter_file_chunks",
    "read_lines",
    "OutFileParser",
    "OutFileReader",
    "ParseState",
    "parse_sample",
    "OutFileDiscovery",
    "discover_out_files",
    "version_from_path",
]
