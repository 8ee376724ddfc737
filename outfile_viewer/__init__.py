"""Out-file Viewer -- Python tooling for plotting large ``*.out`` time-series exports.

An ``*.out`` file is a whitespace-delimited text table: an optional preamble,
a header row containing ``Time``, a units row, then one data row per sample.
Simulation and test-rig exports routinely reach millions of rows.

This package provides tools for:
- Streaming ``*.out`` files line by line, independent of chunk boundaries
- Parsing the header/units/data layout into aligned float64 columns
- Reducing each column to a bounded point budget with LTTB
- Grouping several files (and several versions of one file) into stacked,
  colour-coded traces per parameter
- Exploring the result in a notebook (ipywidgets + matplotlib)

Key principles:
- No synthetic time: the x axis is always the file's ``Time`` column
- No interpolation: downsampling selects existing samples only
- Per-file isolation: a broken file is reported and never blocks the others

Main subpackages:
- ingest: Line stream reader, ``*.out`` parser, file discovery
- analysis: LTTB downsampler, series assembly, plot session
- models: Data models (ParsedTable, FileCatalog, ViewerProfile)
- gui: Interactive ipywidgets panel and matplotlib stack renderer
- scripts: Command-line summary/export
"""

__all__ = []
