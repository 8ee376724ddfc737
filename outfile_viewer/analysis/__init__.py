"""Analysis package - downsampling and trace assembly.

Design principle:
  - Ingest produces complete :class:`~outfile_viewer.models.frames.ParsedTable` objects.
  - Analysis consumes them and produces compact, display-ready series.

Project-wide hard constraint:
  - No synthetic/modified time is allowed anywhere.

Accordingly, downsampling selects existing samples (LTTB) and never
interpolates or resamples the time axis.
"""

from .lttb import downsample, downsample_series, downsample_table, lttb_indices
from .series import ColorAssigner, assemble_stacks, filter_names, wildcard_to_regex
from .session import PlotSession

__all__ = [
    "downsample",
    "downsample_series",
    "downsample_table",
    "lttb_indices",
    "ColorAssigner",
    "assemble_stacks",
    "filter_names",
    "wildcard_to_regex",
    "PlotSession",
]
