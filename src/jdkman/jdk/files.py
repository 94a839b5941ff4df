"""
File Operations for the jdkman Resolution Engine

Link handling, recursive deletion, the in-use probe used before uninstalling on
Windows, archive unpacking with path traversal protection and the install
transaction that swaps a freshly unpacked JDK into place.
"""

import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Callable, Optional, Sequence, Union

from jdkman.constants import (
    DELETE_ME_PREFIX,
    MAC_JDK_SELECT_FOLDER,
    OLD_DIR_SUFFIX,
    TARGZ_EXTENSIONS,
    TMP_DIR_SUFFIX,
    ZIP_EXTENSIONS,
)
from jdkman.exceptions import (
    ArchiveError,
    ExtractionError,
    InstallError,
    JdkManagerError,
    ResourceBusyError,
)
from jdkman.log_utils import logger
from jdkman.utils import is_mac, is_windows, run_command

Pathish = Union[str, Path]

_S_IFLNK = 0o120000


def _is_junction(path: Pathish) -> bool:
    isjunction = getattr(os.path, "isjunction", None)
    return bool(isjunction and isjunction(path))


def is_link(path: Pathish) -> bool:
    """Return True if the final component of `path` is a symbolic link or a junction."""
    return os.path.islink(path) or _is_junction(path)


def mkdirs(path: Pathish) -> None:
    os.makedirs(path, exist_ok=True)


def delete_path(path: Pathish) -> None:
    """
    Delete a file, link or folder tree depth-first.

    Links (including broken ones) are removed as leaves; their targets are never
    touched. Missing paths are ignored.

    Raises:
        OSError: If something exists at `path` but can't be removed.
    """
    path = Path(path)
    if is_link(path):
        logger.debug(f"Deleting link {path}")
        if _is_junction(path):
            os.rmdir(path)
        else:
            os.unlink(path)
    elif path.is_dir():
        logger.debug(f"Deleting folder {path}")
        for child in sorted(path.iterdir(), reverse=True):
            delete_path(child)
        os.rmdir(path)
    elif path.exists():
        logger.debug(f"Deleting file {path}")
        if is_windows():
            os.chmod(path, stat.S_IWRITE)
        os.remove(path)


def is_broken_link(path: Pathish) -> bool:
    return is_link(path) and not os.path.exists(path)


def _create_junction(link: Path, target: Path) -> bool:
    return run_command("cmd.exe", "/c", "mklink", "/j", str(link), str(target)) is not None


def _create_symbolic_link(link: Path, target: Path) -> bool:
    try:
        os.symlink(target, link, target_is_directory=target.is_dir())
        return True
    except OSError as e:
        if is_windows():
            logger.info(f"Creation of symbolic link failed {link} -> {target}")
            logger.info(
                "Creating symbolic links on Windows requires Developer Mode or elevated privileges."
            )
        logger.debug(f"Failed to create symbolic link {link} -> {target}: {e}")
        return False


def create_link(link: Pathish, target: Pathish) -> None:
    """
    Create a link at `link` pointing to `target`.

    On Windows a directory junction is used for folder targets since junctions
    don't need special privileges; everywhere else a symbolic link is created.
    Nothing happens if `link` already exists; a broken link in the way is removed.

    Raises:
        JdkManagerError: If the link could not be created.
    """
    link = Path(link)
    target = Path(os.path.abspath(target))
    if os.path.exists(link):
        logger.debug(f"Link already exists {link}, aborting")
        return
    if is_broken_link(link):
        delete_path(link)
    mkdirs(link.parent)
    if is_windows() and target.is_dir():
        created = _create_junction(link, target)
    else:
        created = _create_symbolic_link(link, target)
    if not created:
        raise JdkManagerError(f"Failed to create link {link} -> {target}")


def same_file(path1: Pathish, path2: Pathish) -> bool:
    """Compare two paths by the file they resolve to, falling back to string equality."""
    try:
        return os.path.samefile(path1, path2)
    except OSError:
        return os.path.abspath(path1) == os.path.abspath(path2)


def check_not_in_use(path: Pathish) -> None:
    """
    Verify no process holds `path` open by renaming it away and back.

    Raises:
        ResourceBusyError: If the folder could not be moved.
    """
    path = Path(path)
    probe = path.parent / f"{DELETE_ME_PREFIX}{path.name}"
    try:
        os.rename(path, probe)
    except OSError as e:
        raise ResourceBusyError(
            f"Folder is in use: {path}", path=path, details=str(e)
        ) from e
    try:
        os.rename(probe, path)
    except OSError as e:
        raise ResourceBusyError(
            f"Unable to move folder back into place: {path}",
            path=path,
            details=str(e),
        ) from e


# =============================================================================
# Archive unpacking
# =============================================================================


def _is_within_base(real_base_dir: str, candidate: str) -> bool:
    try:
        return os.path.commonpath([real_base_dir, candidate]) == real_base_dir
    except ValueError:
        return False


def safe_extract_path(extract_dir: Pathish, member_path: str) -> Path:
    """
    Resolve where an archive member goes and prevent directory traversal.

    Raises:
        ExtractionError: If the member would end up outside `extract_dir`.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    normalized_path = os.path.realpath(os.path.join(real_extract_dir, member_path))
    if not _is_within_base(real_extract_dir, normalized_path):
        raise ExtractionError(
            f"Entry is outside of the target dir: {member_path}",
            details=str(extract_dir),
        )
    return Path(normalized_path)


def _relocate_member(
    name: str, strip_root: bool, select_folder: Optional[Sequence[str]]
) -> Optional[str]:
    """
    Map an archive member name to its path inside the output folder.

    Returns:
        Optional[str]: The relative output path, or `None` when the member should be skipped.
    """
    if "\x00" in name:
        raise ExtractionError(f"Entry name contains a null byte: {name!r}")
    parts = [p for p in PurePosixPath(name.replace("\\", "/")).parts if p not in ("", ".")]
    if strip_root:
        if len(parts) <= 1:
            return None
        parts = parts[1:]
    if select_folder:
        count = len(select_folder)
        if len(parts) <= count or tuple(parts[:count]) != tuple(select_folder):
            return None
        parts = parts[count:]
    if not parts:
        return None
    return os.path.join(*parts)


def _apply_mode(path: Path, mode: int) -> None:
    if mode and not is_windows():
        os.chmod(path, stat.S_IMODE(mode))


def _make_symlink(entry: Path, link_target: str) -> None:
    mkdirs(entry.parent)
    if os.path.lexists(entry):
        return
    try:
        os.symlink(link_target, entry)
    except OSError as e:
        logger.warning(
            f"Could not create symbolic link {entry} -> {link_target} due to {e}"
        )


def _unzip(
    archive: Path,
    output_dir: Path,
    strip_root: bool,
    select_folder: Optional[Sequence[str]],
) -> None:
    with zipfile.ZipFile(archive, "r") as zip_ref:
        for info in zip_ref.infolist():
            rel = _relocate_member(info.filename, strip_root, select_folder)
            if rel is None:
                continue
            entry = safe_extract_path(output_dir, rel)
            unix_mode = info.external_attr >> 16
            if info.is_dir():
                mkdirs(entry)
            elif stat.S_IFMT(unix_mode) == _S_IFLNK:
                _make_symlink(entry, zip_ref.read(info).decode("utf-8"))
            else:
                mkdirs(entry.parent)
                with zip_ref.open(info) as source, open(entry, "wb") as target:
                    shutil.copyfileobj(source, target)
                _apply_mode(entry, unix_mode)


def _untargz(
    archive: Path,
    output_dir: Path,
    strip_root: bool,
    select_folder: Optional[Sequence[str]],
) -> None:
    with tarfile.open(archive, "r:gz") as tar_ref:
        for member in tar_ref:
            rel = _relocate_member(member.name, strip_root, select_folder)
            if rel is None:
                continue
            entry = safe_extract_path(output_dir, rel)
            if member.isdir():
                mkdirs(entry)
            elif member.issym():
                _make_symlink(entry, member.linkname)
            elif member.islnk():
                link_rel = _relocate_member(member.linkname, strip_root, select_folder)
                if link_rel is None:
                    continue
                source = safe_extract_path(output_dir, link_rel)
                mkdirs(entry.parent)
                shutil.copy2(source, entry)
            elif member.isfile():
                mkdirs(entry.parent)
                extracted = tar_ref.extractfile(member)
                if extracted is None:
                    continue
                with extracted as source, open(entry, "wb") as target:
                    shutil.copyfileobj(source, target)
                _apply_mode(entry, member.mode)


def unpack(
    archive: Pathish,
    output_dir: Pathish,
    strip_root: bool = False,
    select_folder: Optional[Sequence[str]] = None,
) -> None:
    """
    Unpack a zip/jar or tar.gz/tgz archive into `output_dir`.

    POSIX permission bits and symbolic links are preserved where the platform
    supports them.

    Parameters:
        archive (Pathish): The archive to unpack; its format is chosen by extension.
        output_dir (Pathish): Destination folder, created if missing.
        strip_root (bool): Drop the single top-level folder of every member.
        select_folder (Optional[Sequence[str]]): Only unpack members below this folder (after stripping), relocated to the output root.

    Raises:
        ExtractionError: If a member would be written outside `output_dir`.
        ArchiveError: If the archive format is unsupported or the archive is corrupt.
    """
    archive = Path(archive)
    output_dir = Path(output_dir)
    name = archive.name.lower()
    mkdirs(output_dir)
    try:
        if name.endswith(ZIP_EXTENSIONS):
            _unzip(archive, output_dir, strip_root, select_folder)
        elif name.endswith(TARGZ_EXTENSIONS):
            _untargz(archive, output_dir, strip_root, select_folder)
        else:
            raise ArchiveError(
                f"Unsupported archive format: {archive.suffix.lstrip('.')}",
                archive_path=archive,
            )
    except (zipfile.BadZipFile, tarfile.TarError, EOFError) as e:
        raise ArchiveError(
            f"Unable to read archive {archive}", archive_path=archive, details=str(e)
        ) from e


def unpack_jdk(archive: Pathish, output_dir: Pathish) -> None:
    """
    Unpack a JDK archive, dropping its root folder.

    On macOS only the ``Contents/Home`` subtree of the bundle is kept.
    """
    select_folder = MAC_JDK_SELECT_FOLDER if is_mac() else None
    unpack(archive, output_dir, strip_root=True, select_folder=select_folder)


# =============================================================================
# Install transaction
# =============================================================================


class AtomicInstallTransaction:
    """
    Replace a folder with freshly produced content, restoring it on failure.

    The new content is produced into a ``<target>.tmp`` sibling, the existing
    folder is moved aside to ``<target>.old``, the new one renamed into place and
    the old one deleted. Debris from an earlier aborted run is cleared first.

    This is a compensating protocol on top of plain renames, not a filesystem
    transaction: it holds no lock, so two processes installing into the same
    target at once can race on the ``.tmp``/``.old`` siblings, and readers of the
    target on non-POSIX filesystems may briefly see it missing mid-swap.
    """

    def __init__(self, target_dir: Pathish, version: int):
        self.target_dir = Path(target_dir)
        self.version = version
        self.tmp_dir = self.target_dir.with_name(self.target_dir.name + TMP_DIR_SUFFIX)
        self.old_dir = self.target_dir.with_name(self.target_dir.name + OLD_DIR_SUFFIX)

    def run(
        self,
        produce: Callable[[Path], None],
        validate: Optional[Callable[[Path], None]] = None,
    ) -> Path:
        """
        Produce new content and swap it into the target folder.

        Parameters:
            produce (Callable[[Path], None]): Writes the new content into the folder it's given.
            validate (Optional[Callable[[Path], None]]): Called with the target after the swap; raising undoes the install.

        Returns:
            Path: The target folder.

        Raises:
            InstallError: If any step fails; the original error is chained and the previous content is restored.
        """
        delete_path(self.tmp_dir)
        delete_path(self.old_dir)
        swapped = False
        try:
            produce(self.tmp_dir)
            if self.target_dir.is_dir():
                os.rename(self.target_dir, self.old_dir)
            elif is_broken_link(self.target_dir):
                delete_path(self.target_dir)
            os.rename(self.tmp_dir, self.target_dir)
            swapped = True
            if validate is not None:
                validate(self.target_dir)
        except Exception as e:
            self._rollback(swapped)
            raise InstallError(
                f"Unable to download or install JDK version {self.version}",
                version=self.version,
                details=str(e),
            ) from e
        # Committed, a leftover .old is cleared by the next run
        try:
            delete_path(self.old_dir)
        except OSError as e:
            logger.warning(f"Unable to remove {self.old_dir}: {e}")
        return self.target_dir

    def _rollback(self, swapped: bool) -> None:
        try:
            delete_path(self.tmp_dir)
            if swapped:
                delete_path(self.target_dir)
            if not os.path.lexists(self.target_dir) and os.path.lexists(self.old_dir):
                os.rename(self.old_dir, self.target_dir)
        except OSError as e:
            logger.warning(f"Unable to restore {self.target_dir}: {e}")
