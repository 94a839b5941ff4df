"""
Tests for link handling, deletion, unpacking and the install transaction.
"""

import io
import os
import tarfile
import zipfile

import pytest

from jdkman.exceptions import (
    ArchiveError,
    ExtractionError,
    InstallError,
    ResourceBusyError,
)
from jdkman.jdk.files import (
    AtomicInstallTransaction,
    check_not_in_use,
    create_link,
    delete_path,
    is_broken_link,
    is_link,
    safe_extract_path,
    same_file,
    unpack,
    unpack_jdk,
)

pytestmark = [pytest.mark.unit, pytest.mark.core]


class TestDeletePath:
    """Test depth-first deletion."""

    def test_deletes_tree(self, tmp_path):
        root = tmp_path / "tree"
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "b" / "file.txt").write_text("x")
        (root / "top.txt").write_text("y")
        delete_path(root)
        assert not root.exists()

    def test_missing_path_is_ignored(self, tmp_path):
        delete_path(tmp_path / "missing")

    def test_link_is_removed_not_followed(self, tmp_path):
        """A link inside a tree is deleted as a leaf; its target survives."""
        target = tmp_path / "target"
        target.mkdir()
        (target / "keep.txt").write_text("keep")
        root = tmp_path / "root"
        root.mkdir()
        os.symlink(target, root / "link")
        delete_path(root)
        assert not root.exists()
        assert (target / "keep.txt").read_text() == "keep"

    def test_broken_link(self, tmp_path):
        link = tmp_path / "dangling"
        os.symlink(tmp_path / "nowhere", link)
        assert is_broken_link(link)
        delete_path(link)
        assert not os.path.lexists(link)


class TestLinks:
    """Test link creation and comparison."""

    def test_create_link(self, tmp_path):
        target = tmp_path / "jdk"
        target.mkdir()
        link = tmp_path / "links" / "default"
        create_link(link, target)
        assert is_link(link)
        assert same_file(link, target)

    def test_create_link_is_noop_when_present(self, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        link = tmp_path / "link"
        create_link(link, first)
        create_link(link, second)
        assert same_file(link, first)

    def test_create_link_replaces_broken_link(self, tmp_path):
        target = tmp_path / "jdk"
        target.mkdir()
        link = tmp_path / "link"
        os.symlink(tmp_path / "gone", link)
        create_link(link, target)
        assert same_file(link, target)

    def test_same_file_falls_back_to_paths(self, tmp_path):
        missing = tmp_path / "missing"
        assert same_file(missing, tmp_path / "." / "missing")
        assert not same_file(missing, tmp_path / "other")


class TestCheckNotInUse:
    """Test the rename round-trip used before uninstalling on Windows."""

    def test_free_folder(self, tmp_path):
        folder = tmp_path / "17"
        folder.mkdir()
        check_not_in_use(folder)
        assert folder.is_dir()
        assert not (tmp_path / "_delete_me_17").exists()

    def test_busy_folder(self, tmp_path, mocker):
        folder = tmp_path / "17"
        folder.mkdir()
        mocker.patch("jdkman.jdk.files.os.rename", side_effect=PermissionError("busy"))
        with pytest.raises(ResourceBusyError) as exc_info:
            check_not_in_use(folder)
        assert exc_info.value.path == folder


class TestUnpack:
    """Test archive unpacking."""

    def test_targz_strip_root(self, tmp_path, jdk_archive):
        archive = jdk_archive(tmp_path / "dl", "21.0.2", "tar.gz")
        out = tmp_path / "out"
        unpack(archive, out, strip_root=True)
        assert (out / "release").read_text() == 'JAVA_VERSION="21.0.2"\n'
        assert os.access(out / "bin" / "javac", os.X_OK)

    def test_zip_strip_root(self, tmp_path, jdk_archive):
        archive = jdk_archive(tmp_path / "dl", "17.0.10", "zip")
        out = tmp_path / "out"
        unpack(archive, out, strip_root=True)
        assert (out / "release").is_file()
        assert os.access(out / "bin" / "java", os.X_OK)

    def test_without_strip(self, tmp_path, jdk_archive):
        archive = jdk_archive(tmp_path / "dl", "17.0.10", "tar.gz", root="jdk-17")
        out = tmp_path / "out"
        unpack(archive, out)
        assert (out / "jdk-17" / "release").is_file()

    def test_select_folder(self, tmp_path, jdk_archive):
        """Only members below the selected folder are kept, moved to the output root."""
        extra = [("jdk-root/Contents/Home/release", b'JAVA_VERSION="21"\n', 0o644)]
        archive = jdk_archive(tmp_path / "dl", "21", "tar.gz", extra=extra)
        out = tmp_path / "out"
        unpack(archive, out, strip_root=True, select_folder=("Contents", "Home"))
        assert (out / "release").is_file()
        assert not (out / "bin").exists()

    def test_unpack_jdk_on_mac(self, tmp_path, jdk_archive, mocker):
        mocker.patch("jdkman.jdk.files.is_mac", return_value=True)
        extra = [("jdk-root/Contents/Home/bin/javac", b"x", 0o755)]
        archive = jdk_archive(tmp_path / "dl", "21", "zip", extra=extra)
        out = tmp_path / "out"
        unpack_jdk(archive, out)
        assert (out / "bin" / "javac").is_file()
        assert not (out / "release").exists()

    def test_targz_symlink(self, tmp_path):
        archive = tmp_path / "links.tar.gz"
        with tarfile.open(archive, "w:gz") as tf:
            data = b"content"
            info = tarfile.TarInfo("root/lib/real.so")
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
            link = tarfile.TarInfo("root/lib/alias.so")
            link.type = tarfile.SYMTYPE
            link.linkname = "real.so"
            tf.addfile(link)
        out = tmp_path / "out"
        unpack(archive, out, strip_root=True)
        assert os.path.islink(out / "lib" / "alias.so")
        assert (out / "lib" / "alias.so").read_bytes() == b"content"

    def test_rejects_traversal_in_zip(self, tmp_path):
        archive = tmp_path / "evil.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("../../evil.txt", "pwned")
        with pytest.raises(ExtractionError):
            unpack(archive, tmp_path / "out")
        assert not (tmp_path / "evil.txt").exists()

    def test_rejects_traversal_in_targz(self, tmp_path):
        archive = tmp_path / "evil.tar.gz"
        with tarfile.open(archive, "w:gz") as tf:
            info = tarfile.TarInfo("root/../../evil.txt")
            info.size = 1
            tf.addfile(info, io.BytesIO(b"x"))
        with pytest.raises(ExtractionError):
            unpack(archive, tmp_path / "out", strip_root=True)

    def test_unsupported_format(self, tmp_path):
        archive = tmp_path / "jdk.rar"
        archive.write_bytes(b"rar")
        with pytest.raises(ArchiveError, match="Unsupported archive format: rar"):
            unpack(archive, tmp_path / "out")

    def test_corrupt_archive(self, tmp_path):
        archive = tmp_path / "jdk.zip"
        archive.write_bytes(b"not a zip")
        with pytest.raises(ArchiveError):
            unpack(archive, tmp_path / "out")

    def test_safe_extract_path(self, tmp_path):
        assert safe_extract_path(tmp_path, "a/b.txt") == tmp_path.resolve() / "a" / "b.txt"
        with pytest.raises(ExtractionError, match="outside of the target dir"):
            safe_extract_path(tmp_path, "../x")


class TestAtomicInstallTransaction:
    """Test swapping freshly produced content into place."""

    def _produce(self, content):
        def produce(tmp_dir):
            tmp_dir.mkdir(parents=True)
            (tmp_dir / "content.txt").write_text(content)

        return produce

    def test_fresh_install(self, tmp_path):
        target = tmp_path / "21"
        result = AtomicInstallTransaction(target, 21).run(self._produce("new"))
        assert result == target
        assert (target / "content.txt").read_text() == "new"
        assert not (tmp_path / "21.tmp").exists()
        assert not (tmp_path / "21.old").exists()

    def test_replaces_existing(self, tmp_path):
        target = tmp_path / "21"
        target.mkdir()
        (target / "content.txt").write_text("old")
        AtomicInstallTransaction(target, 21).run(self._produce("new"))
        assert (target / "content.txt").read_text() == "new"
        assert not (tmp_path / "21.old").exists()

    def test_clears_debris(self, tmp_path):
        """Leftovers of an aborted earlier run are removed first."""
        (tmp_path / "21.tmp").mkdir()
        (tmp_path / "21.tmp" / "stale.txt").write_text("stale")
        (tmp_path / "21.old").mkdir()
        target = tmp_path / "21"
        AtomicInstallTransaction(target, 21).run(self._produce("new"))
        assert not (target / "stale.txt").exists()
        assert not (tmp_path / "21.old").exists()

    def test_failed_produce_restores_previous(self, tmp_path):
        """A failure while producing leaves the target exactly as it was."""
        target = tmp_path / "21"
        target.mkdir()
        (target / "content.txt").write_text("old")

        def produce(tmp_dir):
            tmp_dir.mkdir()
            (tmp_dir / "partial.txt").write_text("partial")
            raise OSError("disk full")

        with pytest.raises(InstallError) as exc_info:
            AtomicInstallTransaction(target, 21).run(produce)
        assert "Unable to download or install JDK version 21" in str(exc_info.value)
        assert exc_info.value.version == 21
        assert isinstance(exc_info.value.__cause__, OSError)
        assert sorted(p.name for p in target.iterdir()) == ["content.txt"]
        assert (target / "content.txt").read_text() == "old"
        assert not (tmp_path / "21.tmp").exists()
        assert not (tmp_path / "21.old").exists()

    def test_failed_validation_restores_previous(self, tmp_path):
        target = tmp_path / "21"
        target.mkdir()
        (target / "content.txt").write_text("old")

        def validate(path):
            raise ValueError("not a JDK")

        with pytest.raises(InstallError):
            AtomicInstallTransaction(target, 21).run(self._produce("new"), validate)
        assert (target / "content.txt").read_text() == "old"
        assert not (tmp_path / "21.old").exists()

    def test_failed_cleanup_keeps_new_content(self, tmp_path, mocker):
        """Once swapped in, the new content stays even if removing the old one fails."""
        target = tmp_path / "21"
        target.mkdir()
        (target / "a_locked").write_text("old")
        (target / "b_data").write_text("old")

        def produce(tmp_dir):
            tmp_dir.mkdir()
            (tmp_dir / "a_locked").write_text("new")
            (tmp_dir / "b_data").write_text("new")

        real_remove = os.remove

        def remove(path):
            if os.path.basename(os.path.dirname(path)) == "21.old" and os.path.basename(path) == "a_locked":
                raise PermissionError("locked")
            real_remove(path)

        mocker.patch("jdkman.jdk.files.os.remove", side_effect=remove)
        result = AtomicInstallTransaction(target, 21).run(produce)

        assert result == target
        assert (target / "a_locked").read_text() == "new"
        assert (target / "b_data").read_text() == "new"
        assert not (tmp_path / "21.tmp").exists()

        mocker.stopall()
        AtomicInstallTransaction(target, 21).run(self._produce("newer"))
        assert not (tmp_path / "21.old").exists()

    def test_failed_fresh_install_leaves_nothing(self, tmp_path):
        target = tmp_path / "21"

        def produce(tmp_dir):
            tmp_dir.mkdir()
            raise RuntimeError("download failed")

        with pytest.raises(InstallError):
            AtomicInstallTransaction(target, 21).run(produce)
        assert list(tmp_path.iterdir()) == []

    def test_broken_link_target_is_replaced(self, tmp_path):
        target = tmp_path / "21"
        os.symlink(tmp_path / "gone", target)
        AtomicInstallTransaction(target, 21).run(self._produce("new"))
        assert not os.path.islink(target)
        assert (target / "content.txt").read_text() == "new"
