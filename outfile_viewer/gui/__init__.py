"""GUI package - interactive ipywidgets viewer.

The notebook viewer has two columns:
1. Files and parameters: add files/folders, search with wildcards, tick to select
2. Plots: one stacked subplot per parameter, legend toggles, log

Entry point:
    from outfile_viewer.gui.app import build_viewer_gui
    gui = build_viewer_gui(["/path/to/runs"])

Design principles:
- The GUI only reads stacks; visibility changes go back through the session
- No synthetic time: plots use each file's Time column
"""
