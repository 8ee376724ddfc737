import tempfile
import unittest
from pathlib import Path

from outfile_viewer.ingest.discovery import OutFileDiscovery, discover_out_files, version_from_path
from outfile_viewer.models.catalog import FileCatalog, FileVersion, is_out_file, source_id_for


class TestCatalog(unittest.TestCase):
    def test_acceptance_filter_is_case_insensitive(self):
        self.assertTrue(is_out_file("run.out"))
        self.assertTrue(is_out_file("RUN.OUT"))
        self.assertTrue(is_out_file("dir/run.Out"))
        self.assertFalse(is_out_file("run.out.txt"))
        self.assertFalse(is_out_file("runout"))

    def test_source_id(self):
        self.assertEqual(source_id_for("runs/a.out", 1234), "runs/a.out_1234")

    def test_add_groups_versions_and_rejects_duplicates(self):
        cat = FileCatalog()
        v1 = FileVersion(path=Path("/x/a.out"), file_key="a.out", mtime_ms=1)
        v2 = FileVersion(path=Path("/y/a.out"), file_key="a.out", mtime_ms=2, relative_path="y/a.out")
        dup = FileVersion(path=Path("/z/a.out"), file_key="a.out", mtime_ms=1)

        self.assertTrue(cat.add(v1))
        self.assertTrue(cat.add(v2))
        self.assertFalse(cat.add(dup))
        self.assertFalse(cat.add(FileVersion(path=Path("/x/a.csv"), file_key="a.csv", mtime_ms=1)))

        self.assertEqual(cat.keys(), ["a.out"])
        self.assertEqual(cat.versions("a.out"), [v1, v2])
        self.assertEqual(cat.versions("missing"), [])
        self.assertIn("a.out", cat)
        self.assertEqual(len(cat), 1)
        self.assertEqual(v2.source_id, "y/a.out_2")
        self.assertEqual(v2.upload_id, "a.out_2")


class TestDiscovery(unittest.TestCase):
    def _tree(self, root: Path):
        (root / "sub").mkdir()
        (root / "b.out").write_text("Time A\n", encoding="utf-8")
        (root / "sub" / "a.OUT").write_text("Time A\n", encoding="utf-8")
        (root / "sub" / "notes.txt").write_text("x", encoding="utf-8")

    def test_discover_is_recursive_and_sorted(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            self._tree(root)
            found = discover_out_files(root)
            self.assertEqual([p.name for p in found], ["b.out", "a.OUT"])
            self.assertEqual(found, sorted(found))

    def test_discover_single_file(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            self._tree(root)
            self.assertEqual([p.name for p in discover_out_files(root / "b.out")], ["b.out"])
            self.assertEqual(discover_out_files(root / "sub" / "notes.txt"), [])

    def test_discover_missing_path(self):
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(FileNotFoundError):
                discover_out_files(Path(d) / "nope")

    def test_version_relative_path_includes_folder_name(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d) / "campaign"
            root.mkdir()
            self._tree(root)
            v = version_from_path(root / "sub" / "a.OUT", root=root)
            self.assertEqual(v.file_key, "a.OUT")
            self.assertEqual(v.relative_path, "campaign/sub/a.OUT")
            self.assertTrue(v.source_id.startswith("campaign/sub/a.OUT_"))

            direct = version_from_path(root / "b.out")
            self.assertIsNone(direct.relative_path)
            self.assertEqual(direct.source_id, direct.upload_id)

    def test_discovery_mixes_files_and_folders(self):
        with tempfile.TemporaryDirectory() as d:
            root = Path(d)
            self._tree(root)
            disc = OutFileDiscovery()
            added = disc.add([root / "sub", root / "b.out", root / "sub" / "notes.txt", root / "gone.out"])

            self.assertEqual([v.file_key for v in added], ["a.OUT", "b.out"])
            self.assertEqual(disc.catalog.keys(), ["a.OUT", "b.out"])
            self.assertEqual(len(disc.warnings), 2)
            self.assertTrue(any("not a .out" in w for w in disc.warnings))
            self.assertTrue(any("not found" in w for w in disc.warnings))

            self.assertEqual(disc.add([root]), [])


if __name__ == "__main__":
    unittest.main()
