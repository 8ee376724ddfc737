import os
import tempfile
import unittest
from pathlib import Path

from outfile_viewer.analysis.session import PlotSession
from outfile_viewer.models.profile import ViewerProfile


GOOD = "Time A\ns unit\n0 10\n1 20\n2 30\n"
OTHER = "Time A B\ns unit N\n0 1 2\n1 2 3\n"


def _write(path: Path, text: str, mtime_s: float = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if mtime_s is not None:
        ns = int(mtime_s * 1_000_000_000)
        os.utime(path, ns=(ns, ns))
    return path


class TestPlotSession(unittest.TestCase):
    def test_end_to_end_small_file_is_not_downsampled(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            _write(root / "run.out", GOOD)

            s = PlotSession(profile=ViewerProfile(downsample_threshold=10))
            self.assertEqual(len(s.add_paths([root])), 1)
            self.assertTrue(s.toggle_file("run.out"))
            self.assertTrue(s.toggle_parameter("A"))

            stacks = s.stacks()
            self.assertEqual(len(stacks), 1)
            self.assertEqual(stacks[0].parameter_name, "A")
            pts = [(p.time, p.value) for p in stacks[0].traces[0].points]
            self.assertEqual(pts, [(0.0, 10.0), (1.0, 20.0), (2.0, 30.0)])
            self.assertEqual(s.column_units, {"A": "unit"})

    def test_non_out_files_are_ignored(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            _write(root / "run.out", GOOD)
            _write(root / "notes.txt", GOOD)
            _write(root / "RUN2.OUT", GOOD)

            s = PlotSession()
            s.add_paths([root])
            self.assertEqual(sorted(s.catalog.keys()), ["RUN2.OUT", "run.out"])

    def test_same_version_is_not_ingested_twice(self):
        with tempfile.TemporaryDirectory() as d:
            p = _write(Path(d) / "run.out", GOOD)

            s = PlotSession()
            added = s.add_paths([p])
            self.assertEqual(s.add_paths([p]), [])

            first = s.ingest_version(added[0])
            self.assertIsNotNone(first)
            self.assertIsNone(s.ingest_version(added[0]))
            self.assertEqual(len(s.versions["run.out"]), 1)
            self.assertTrue(s.is_ingested("run.out", added[0].source_id))

    def test_structural_failures_do_not_block_other_files(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            _write(root / "good.out", OTHER)
            _write(root / "empty.out", "")
            _write(root / "nodata.out", "Time A\ns V\n")

            s = PlotSession()
            versions = s.add_paths([root])
            merged = s.ingest_many(versions)

            self.assertEqual([v.file_key for v in merged], ["good.out"])
            self.assertEqual(s.available_parameters, ["A", "B"])
            reasons = sorted(msg.split(":")[0] for msg in s.failures.values())
            self.assertEqual(reasons, ["NoDataRows", "NoHeaderFound"])

    def test_versions_of_one_key_keep_submission_order(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d) / "runs"
            _write(root / "x" / "run.out", GOOD, mtime_s=1_700_000_000)
            _write(root / "y" / "run.out", OTHER, mtime_s=1_700_000_100)

            s = PlotSession(profile=ViewerProfile(max_workers=2))
            added = s.add_paths([root])
            self.assertEqual(len(added), 2)
            self.assertEqual(added[0].relative_path, "runs/x/run.out")
            self.assertEqual(added[0].source_id, "runs/x/run.out_1700000000000")

            s.toggle_file("run.out")
            s.toggle_parameter("A")
            traces = s.stacks()[0].traces
            self.assertEqual([t.name for t in traces], ["run.out (1)", "run.out (2)"])
            self.assertEqual([t.id for t in traces], ["run.out__0__A", "run.out__1__A"])
            self.assertEqual(traces[0].color, traces[1].color)

    def test_same_name_and_mtime_is_one_version(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            _write(root / "x" / "run.out", GOOD, mtime_s=1_700_000_000)
            _write(root / "y" / "run.out", GOOD, mtime_s=1_700_000_000)

            s = PlotSession()
            self.assertEqual(len(s.add_paths([root])), 1)

    def test_legend_toggle_and_deactivation(self):
        with tempfile.TemporaryDirectory() as d:
            _write(Path(d) / "run.out", GOOD)
            s = PlotSession()
            s.add_paths([d])
            s.toggle_file("run.out")
            s.toggle_parameter("A")

            tid = s.stacks()[0].traces[0].id
            s.on_legend_toggle(tid, False)
            self.assertFalse(s.stacks()[0].traces[0].visible)
            s.set_visible(tid, True)
            self.assertTrue(s.stacks()[0].traces[0].visible)

            self.assertFalse(s.toggle_file("run.out"))
            self.assertEqual(s.stacks()[0].traces, ())
            self.assertFalse(s.toggle_parameter("A"))
            self.assertEqual(s.stacks(), [])

    def test_explicit_selection_state_is_idempotent(self):
        with tempfile.TemporaryDirectory() as d:
            _write(Path(d) / "run.out", GOOD)
            s = PlotSession()
            s.add_paths([d])

            self.assertTrue(s.set_file_active("run.out", True))
            self.assertTrue(s.set_file_active("run.out", True))
            self.assertEqual(s.active_file_keys, ["run.out"])
            self.assertEqual(len(s.versions["run.out"]), 1)
            self.assertFalse(s.set_file_active("run.out", False))
            self.assertFalse(s.set_file_active("run.out", False))
            self.assertEqual(s.active_file_keys, [])

            self.assertTrue(s.set_parameter_selected("A", True))
            self.assertTrue(s.set_parameter_selected("A", True))
            self.assertEqual(s.selected_parameters, ["A"])
            self.assertFalse(s.set_parameter_selected("A", False))
            self.assertEqual(s.selected_parameters, [])

    def test_cancelled_ingestion_leaves_no_state(self):
        with tempfile.TemporaryDirectory() as d:
            _write(Path(d) / "run.out", GOOD)
            s = PlotSession()
            v = s.add_paths([d])[0]
            self.assertIsNone(s.ingest_version(v, cancel=lambda: True))
            self.assertEqual(s.versions, {})
            self.assertEqual(s.failures, {})
            self.assertEqual(s.available_parameters, [])

    def test_search_filters(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            _write(root / "alpha.out", OTHER)
            _write(root / "beta.out", GOOD)
            s = PlotSession()
            s.ingest_many(s.add_paths([root]))

            self.assertEqual(s.filtered_file_keys("AL*"), ["alpha.out"])
            self.assertEqual(s.filtered_file_keys(""), ["alpha.out", "beta.out"])
            self.assertEqual(s.filtered_parameters("b"), ["B"])


if __name__ == "__main__":
    unittest.main()
