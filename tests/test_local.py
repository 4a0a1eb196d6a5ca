import datetime
import pathlib
import tempfile
import unittest as ut

from omnivfs.exceptions import ObjectNotFoundError, PartialMoveError
from omnivfs.local import LocalFileSystem


class LocalFileTests(ut.TestCase):

    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self.root = pathlib.Path(self._temp_dir.name).absolute()
        self.fs = LocalFileSystem()

    def tearDown(self):
        self._temp_dir.cleanup()

    def _file(self, relative: str):
        return self.fs.new_file("", f"{self.root.as_posix()}/{relative}")

    def test_scheme(self):
        self.assertEqual(self.fs.scheme(), "file")

    def test_volume_is_ignored(self):
        file = self.fs.new_file("somehost", f"{self.root.as_posix()}/a.txt")
        self.assertEqual(file.location().volume(), "")
        self.assertEqual(file.uri(), f"file://{self.root.as_posix()}/a.txt")

    def test_write_creates_parent_directories(self):
        file = self._file("one/two/three.txt")
        file.write(b"content")
        file.close()
        self.assertEqual((self.root / "one" / "two" / "three.txt").read_bytes(), b"content")

    def test_round_trip(self):
        file = self._file("data.bin")
        file.write(b"hello world!")
        file.close()
        reopened = self._file("data.bin")
        self.assertEqual(reopened.read(), b"hello world!")
        reopened.seek(6)
        self.assertEqual(reopened.read(), b"world!")
        reopened.close()

    def test_read_missing_file(self):
        file = self._file("missing.txt")
        with self.assertRaises(ObjectNotFoundError):
            file.read()
        self.assertFalse((self.root / "missing.txt").exists())

    def test_exists(self):
        file = self._file("exists.txt")
        self.assertFalse(file.exists())
        file.write(b"")
        self.assertTrue(file.exists())
        file.close()

    def test_close_without_open(self):
        self._file("never_opened.txt").close()
        self.assertFalse((self.root / "never_opened.txt").exists())

    def test_close_twice(self):
        file = self._file("twice.txt")
        file.write(b"abc")
        file.close()
        file.close()
        self.assertEqual(file.size(), 3)

    def test_size_and_last_modified(self):
        (self.root / "stat.txt").write_bytes(b"12345")
        file = self._file("stat.txt")
        self.assertEqual(file.size(), 5)
        modified = file.last_modified()
        self.assertEqual(modified.tzinfo, datetime.timezone.utc)

    def test_size_of_missing_file(self):
        with self.assertRaises(ObjectNotFoundError):
            self._file("missing.txt").size()

    def test_delete(self):
        file = self._file("delete.txt")
        file.write(b"abc")
        file.delete()
        self.assertFalse(file.exists())
        file.close()

    def test_delete_missing_file(self):
        with self.assertRaises(ObjectNotFoundError):
            self._file("missing.txt").delete()

    def test_copy_to_location(self):
        (self.root / "src.txt").write_bytes(b"hello world!")
        source = self._file("src.txt")
        location = self.fs.new_location("", f"{self.root.as_posix()}/copies/")
        copied = source.copy_to_location(location)
        self.assertEqual(copied.path(), f"{self.root.as_posix()}/copies/src.txt")
        self.assertEqual(copied.read(), b"hello world!")
        copied.close()
        self.assertTrue(source.exists())

    def test_copy_overwrites_longer_target(self):
        (self.root / "src.txt").write_bytes(b"short")
        (self.root / "dst.txt").write_bytes(b"something much longer")
        self._file("src.txt").copy_to_file(self._file("dst.txt"))
        self.assertEqual((self.root / "dst.txt").read_bytes(), b"short")

    def test_copy_empty_file(self):
        (self.root / "empty.txt").write_bytes(b"")
        target = self._file("out/empty.txt")
        self._file("empty.txt").copy_to_file(target)
        self.assertTrue(target.exists())
        self.assertEqual(target.size(), 0)

    def test_copy_missing_file(self):
        target = self._file("dst.txt")
        with self.assertRaises(ObjectNotFoundError):
            self._file("missing.txt").copy_to_file(target)
        self.assertFalse(target.exists())

    def test_copy_onto_itself(self):
        (self.root / "same.txt").write_bytes(b"same")
        self._file("same.txt").copy_to_file(self._file("same.txt"))
        self.assertEqual((self.root / "same.txt").read_bytes(), b"same")

    def test_move_to_file(self):
        (self.root / "src.txt").write_bytes(b"moving")
        source = self._file("src.txt")
        source.move_to_file(self._file("dst.txt"))
        self.assertFalse(source.exists())
        self.assertEqual((self.root / "dst.txt").read_bytes(), b"moving")

    def test_move_onto_itself_keeps_file(self):
        (self.root / "same.txt").write_bytes(b"same")
        self._file("same.txt").move_to_file(self._file("same.txt"))
        self.assertEqual((self.root / "same.txt").read_bytes(), b"same")

    def test_move_to_location(self):
        (self.root / "src.txt").write_bytes(b"moving")
        source = self._file("src.txt")
        location = self.fs.new_location("", f"{self.root.as_posix()}/moved/")
        moved = source.move_to_location(location)
        self.assertIs(moved, source)
        self.assertEqual(source.path(), f"{self.root.as_posix()}/moved/src.txt")
        self.assertTrue(source.exists())
        self.assertFalse((self.root / "src.txt").exists())

    def test_move_with_failed_delete(self):
        (self.root / "src.txt").write_bytes(b"moving")
        source = self._file("src.txt")
        target = self._file("dst.txt")

        def _fail():
            raise OSError("cannot delete")

        source.delete = _fail
        with self.assertRaises(PartialMoveError) as h:
            source.move_to_file(target)
        self.assertIs(h.exception.source, source)
        self.assertTrue((self.root / "src.txt").exists())
        self.assertTrue((self.root / "dst.txt").exists())
