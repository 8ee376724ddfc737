from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import ipywidgets as w
import matplotlib.pyplot as plt

from outfile_viewer.analysis.session import PlotSession
from outfile_viewer.gui.log_view import HtmlLog, attach_to_logger
from outfile_viewer.gui.plots import render_stacks
from outfile_viewer.models.profile import ViewerProfile


# Keep a single active GUI instance per kernel to avoid duplicated callbacks / stacked widgets.
_ACTIVE_GUI: Optional[w.Widget] = None


@dataclass
class ViewerState:
    session: PlotSession
    fig: object | None = None
    file_boxes: Dict[str, w.Checkbox] = field(default_factory=dict)
    param_boxes: Dict[str, w.Checkbox] = field(default_factory=dict)
    busy: bool = False


def build_viewer_gui(
    paths: Optional[List[str]] = None,
    *,
    profile: Optional[ViewerProfile] = None,
    session: Optional[PlotSession] = None,
) -> w.Widget:
    """
    Notebook viewer (Jupyter / VSCode notebooks).

    Left column: files and parameters (each with a wildcard search box).
    Right column: stacked plots, legend toggles and the log.

    Example::

        from outfile_viewer.gui.app import build_viewer_gui
        build_viewer_gui(["/data/runs"])
    """
    global _ACTIVE_GUI

    if _ACTIVE_GUI is not None:
        try:
            _ACTIVE_GUI.close()
        except Exception:
            pass
        _ACTIVE_GUI = None

    state = ViewerState(session=session or PlotSession(profile=profile))
    log = HtmlLog(title="Log", height_px=160)
    attach_to_logger(log)

    folder = w.Text(
        description="Path",
        placeholder="folder or *.out file",
        layout=w.Layout(width="100%"),
    )
    btn_add = w.Button(description="Add", button_style="primary", layout=w.Layout(width="90px"))

    file_search = w.Text(placeholder="search files (* = wildcard)", layout=w.Layout(width="100%"))
    param_search = w.Text(placeholder="search parameters (* = wildcard)", layout=w.Layout(width="100%"))
    files_box = w.VBox(layout=w.Layout(max_height="260px", overflow_y="auto"))
    params_box = w.VBox(layout=w.Layout(max_height="320px", overflow_y="auto"))
    legend_box = w.VBox(layout=w.Layout(max_height="200px", overflow_y="auto"))

    status = w.HTML("<b>Status:</b> idle")
    out_plot = w.Output(layout=w.Layout(border="1px solid #ddd", padding="6px", min_height="300px"))

    def _set_status(s: str) -> None:
        status.value = f"<b>Status:</b> {s}"

    # -----------------------
    # Plot
    # -----------------------

    def _clear_and_close() -> None:
        out_plot.clear_output(wait=True)
        if state.fig is not None:
            plt.close(state.fig)
            state.fig = None

    def _replot() -> None:
        stacks = state.session.stacks()
        with out_plot:
            _clear_and_close()
            fig = plt.figure(figsize=(10.0, max(2.8, 2.8 * len(stacks))))
            render_stacks(stacks, fig)
            plt.show()
            state.fig = fig
        _refresh_legend(stacks)

    def _refresh_legend(stacks) -> None:
        rows = []
        for stack in stacks:
            for trace in stack.traces:
                cb = w.Checkbox(
                    value=trace.visible,
                    description=f"{stack.parameter_name}: {trace.name}",
                    indent=False,
                    layout=w.Layout(width="100%"),
                )
                swatch = w.HTML(f"<span style='color:{trace.color}; font-size:16px;'>&#9632;</span>")

                def _on_toggle(change, tid=trace.id):
                    state.session.on_legend_toggle(tid, bool(change["new"]))
                    _replot()

                cb.observe(_on_toggle, names="value")
                rows.append(w.HBox([swatch, cb]))
        legend_box.children = tuple(rows)

    # -----------------------
    # Lists
    # -----------------------

    def _refresh_files() -> None:
        rows = []
        state.file_boxes = {}
        for key in state.session.filtered_file_keys(file_search.value):
            n = len(state.session.catalog.versions(key))
            label = key if n <= 1 else f"{key} ({n} versions)"
            cb = w.Checkbox(
                value=key in state.session.active_file_keys,
                description=label,
                indent=False,
                layout=w.Layout(width="100%"),
            )

            def _on_file(change, file_key=key, box=cb):
                active = file_key in state.session.active_file_keys
                if state.busy:
                    # another file is loading: put the box back to the session state
                    box.value = active
                    return
                want = bool(change["new"])
                if want == active:
                    return
                state.busy = True
                _set_status(f"loading {file_key} ...")
                try:
                    state.session.set_file_active(file_key, want)
                finally:
                    state.busy = False
                    _set_status("idle")
                _refresh_params()
                _replot()

            cb.observe(_on_file, names="value")
            state.file_boxes[key] = cb
            rows.append(cb)
        files_box.children = tuple(rows)

    def _refresh_params() -> None:
        rows = []
        state.param_boxes = {}
        units = state.session.column_units
        for name in state.session.filtered_parameters(param_search.value):
            unit = units.get(name, "")
            cb = w.Checkbox(
                value=name in state.session.selected_parameters,
                description=f"{name} [{unit}]" if unit else name,
                indent=False,
                layout=w.Layout(width="100%"),
            )

            def _on_param(change, param=name):
                want = bool(change["new"])
                if want == (param in state.session.selected_parameters):
                    return
                state.session.set_parameter_selected(param, want)
                _replot()

            cb.observe(_on_param, names="value")
            state.param_boxes[name] = cb
            rows.append(cb)
        params_box.children = tuple(rows)

    def _add_paths(raw: List[str]) -> None:
        raw = [p for p in raw if p and p.strip()]
        if not raw:
            log.warning("Enter a folder or a *.out file path.")
            return
        try:
            added = state.session.add_paths([p.strip() for p in raw])
        except Exception as exc:
            log.error(f"ERROR: {exc}")
            return
        if not added:
            log.warning("No new *.out files found.")
        _refresh_files()

    def _on_add(_btn) -> None:
        _add_paths([folder.value])

    btn_add.on_click(_on_add)
    file_search.observe(lambda _c: _refresh_files(), names="value")
    param_search.observe(lambda _c: _refresh_params(), names="value")

    if paths:
        _add_paths(list(paths))
    _refresh_files()
    _refresh_params()

    # -----------------------
    # Layout
    # -----------------------

    header = w.HTML(
        "<h3>Time Series Plotting Tool</h3>"
        "<div style='color:#666;'>1. Add *.out files or folders. 2. Select files. "
        "3. Pick parameters. Series are reduced with LTTB "
        f"({state.session.profile.downsample_threshold} points per trace).</div>"
    )
    left = w.VBox(
        [
            w.HBox([folder, btn_add]),
            w.HTML("<b>Files</b>"),
            file_search,
            files_box,
            w.HTML("<b>Parameters</b>"),
            param_search,
            params_box,
        ],
        layout=w.Layout(width="32%"),
    )
    right = w.VBox(
        [status, out_plot, w.HTML("<b>Legend</b>"), legend_box, log.panel],
        layout=w.Layout(width="68%"),
    )
    gui = w.VBox([header, w.HBox([left, right], layout=w.Layout(width="100%"))])

    _ACTIVE_GUI = gui
    return gui
