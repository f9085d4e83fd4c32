"""Unit tests for image file naming and the disk file buffer"""

from pathlib import Path

import pytest

from st80.store.files import DiskFile, imageFiles_derive


class TestImageFilesDerive:
    """Test image argument to file name derivation"""

    def test_with_suffix(self, tmp_path):
        files = imageFiles_derive(str(tmp_path / "world.im"))
        assert files.base == tmp_path / "world"
        assert files.image == tmp_path / "world.im"

    def test_suffix_case_insensitive(self, tmp_path):
        files = imageFiles_derive(str(tmp_path / "WORLD.IM"))
        assert files.base == tmp_path / "WORLD"

    def test_without_suffix(self, tmp_path):
        files = imageFiles_derive(str(tmp_path / "world"))
        assert files.image == tmp_path / "world.im"
        assert files.sibling_get(".dsk") == tmp_path / "world.dsk"

    def test_existing_suffixless_file(self, tmp_path):
        """Test a suffix-less image file is used as-is when name.im is absent"""
        (tmp_path / "snapshot").write_bytes(b"IMAGE")
        files = imageFiles_derive(str(tmp_path / "snapshot"))
        assert files.image == tmp_path / "snapshot"
        assert files.sibling_get(".zdisk") == tmp_path / "snapshot.zdisk"

    def test_suffixed_file_preferred(self, tmp_path):
        (tmp_path / "world").write_bytes(b"OTHER")
        (tmp_path / "world.im").write_bytes(b"IMAGE")
        assert imageFiles_derive(str(tmp_path / "world")).image == tmp_path / "world.im"


class TestDiskFile:
    """Test DiskFile buffer"""

    @pytest.fixture
    def disk_path(self, tmp_path) -> Path:
        path = tmp_path / "world.dsk"
        path.write_bytes(bytes(range(8)))
        return path

    def test_load_and_read(self, disk_path):
        disk = DiskFile.load(disk_path)
        assert len(disk) == 8
        assert disk.read(2, 3) == b"\x02\x03\x04"
        assert disk.is_dirty is False

    def test_save_only_when_dirty(self, disk_path):
        disk = DiskFile.load(disk_path)
        assert disk.save() is False
        disk.write(0, b"\xFF")
        assert disk.is_dirty is True
        assert disk.save() is True
        assert disk.is_dirty is False
        assert disk_path.read_bytes()[0] == 0xFF
        assert disk.save() is False

    def test_save_leaves_no_temp_files(self, disk_path):
        disk = DiskFile.load(disk_path)
        disk.write(7, b"\x00")
        disk.save()
        assert sorted(p.name for p in disk_path.parent.iterdir()) == ["world.dsk"]

    def test_out_of_range(self, disk_path):
        disk = DiskFile.load(disk_path)
        with pytest.raises(IndexError):
            disk.read(6, 4)
        with pytest.raises(IndexError):
            disk.write(-1, b"\x00")
        assert disk.is_dirty is False

    def test_load_missing(self, tmp_path):
        with pytest.raises(OSError):
            DiskFile.load(tmp_path / "missing.dsk")
