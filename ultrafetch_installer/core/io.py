from __future__ import annotations

import contextlib
import hashlib
import os
import sys
import tempfile
from collections.abc import Iterator
from pathlib import Path


def _fsync_directory(directory: Path) -> None:
    """
    Best-effort fsync of the containing directory so the rename metadata is durable.
    Supported on Darwin/Linux; intentionally silent on failure.
    """
    platform_name = str(sys.platform)
    if not platform_name.startswith(("darwin", "linux")):
        return

    flags = os.O_RDONLY
    if hasattr(os, "O_DIRECTORY"):
        flags |= os.O_DIRECTORY

    try:
        dir_fd = os.open(str(directory), flags)
    except OSError:
        return

    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


@contextlib.contextmanager
def temporary_sibling(path: Path | str) -> Iterator[Path]:
    """
    Yield an empty temp file in the same directory as `path`, so it can later
    be renamed over `path` atomically. The temp file is removed on exit unless
    it was already moved away (including on KeyboardInterrupt).
    """
    final_path = Path(path)
    final_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        dir=str(final_path.parent),
        prefix=f".{final_path.name}.",
        suffix=".tmp",
    )
    os.close(fd)
    temp_path = Path(temp_name)
    try:
        yield temp_path
    finally:
        with contextlib.suppress(FileNotFoundError):
            temp_path.unlink()


def atomic_install(source: Path | str, path: Path | str, perms: int | None = None) -> None:
    """
    Move a fully written file into place:
    1) fsync the source
    2) optional chmod
    3) os.replace(source, final)
    4) best-effort fsync destination directory
    """
    source_path = Path(source)
    final_path = Path(path)

    with source_path.open("rb") as f:
        os.fsync(f.fileno())

    if perms is not None:
        os.chmod(source_path, perms)  # noqa: PTH101

    os.replace(source_path, final_path)  # noqa: PTH105
    _fsync_directory(final_path.parent)


def hash_file(path: Path) -> str | None:
    if not path.exists() or not path.is_file():
        return None
    hasher = hashlib.sha256()
    with path.open("rb") as f:
        while True:
            buf = f.read(4096)
            if not buf:
                break
            hasher.update(buf)
    return "sha256:" + hasher.hexdigest()
