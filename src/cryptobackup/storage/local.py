import json
import logging
import os
import posixpath
import shutil
import tempfile

from pathlib import Path
from typing import BinaryIO, Dict, List, Optional

from cryptobackup.storage.base import register_store
from cryptobackup.utils.context import OperationContext, check
from cryptobackup.utils.dataModels import FileInfo, META_SUFFIX, TMP_SUFFIX
from cryptobackup.utils.errors import (
    BackupIOError,
    ConstructionError,
    FormatError,
    NotFoundError,
    UnsafePathError,
)
from cryptobackup.utils.helper import check_metadata

logger = logging.getLogger(__name__)


def _stage_temp(path: Path, write) -> Path:
    """Write into a uniquely named sibling temp file and return its path."""
    fd, name = tempfile.mkstemp(dir=path.parent, prefix="." + path.name + ".", suffix=TMP_SUFFIX)
    tmp = Path(name)
    try:
        with os.fdopen(fd, "wb") as f:
            write(f)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return tmp


class LocalStore:
    """Filesystem store: ``<base>/<path>`` holds the blob, ``<base>/<path>.meta`` the metadata JSON.

    Remote paths are joined to the base as-is. Traversal sequences such as
    ``../`` are followed unless the store is built with ``confine=True``.
    """

    def __init__(self, base_path: str | os.PathLike, confine: bool = False):
        if not str(base_path):
            raise ConstructionError("base path cannot be empty")
        self.base_path = Path(base_path)
        self.confine = confine
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupIOError(f"failed to create base directory: {e}", stage="store") from e

    def _full_path(self, remote_path: str) -> Path:
        rel = remote_path.replace("\\", "/").lstrip("/")
        full = self.base_path / rel if rel else self.base_path
        if self.confine:
            root = self.base_path.resolve()
            resolved = full.resolve()
            if resolved != root and root not in resolved.parents:
                raise UnsafePathError(f"path escapes storage root: {remote_path}", stage="store")
        return full

    @staticmethod
    def _meta_path(full: Path) -> Path:
        return full.with_name(full.name + META_SUFFIX)

    def upload(self, remote_path: str, data: BinaryIO, metadata: Optional[Dict[str, str]] = None,
               ctx: Optional[OperationContext] = None) -> None:
        check(ctx)
        full = self._full_path(remote_path)
        meta_path = self._meta_path(full)
        staged: List[Path] = []
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            # both files are written before either replaces the old object
            meta_tmp = None
            if metadata:
                doc = json.dumps(dict(metadata), ensure_ascii=False, separators=(",", ":"))
                meta_tmp = _stage_temp(meta_path, lambda f: f.write(doc.encode("utf-8")))
                staged.append(meta_tmp)
            data_tmp = _stage_temp(full, lambda f: shutil.copyfileobj(data, f))
            staged.append(data_tmp)

            if meta_tmp is not None:
                os.replace(meta_tmp, meta_path)
            else:
                # no stale sidecar from an earlier upload
                meta_path.unlink(missing_ok=True)
            os.replace(data_tmp, full)
        except OSError as e:
            for tmp in staged:
                tmp.unlink(missing_ok=True)
            raise BackupIOError(f"failed to write {remote_path}: {e}", stage="store") from e
        logger.debug("stored %s (%d metadata keys)", remote_path, len(metadata or {}))
        check(ctx)

    def download(self, remote_path: str, dst: BinaryIO, ctx: Optional[OperationContext] = None) -> None:
        check(ctx)
        full = self._full_path(remote_path)
        try:
            with full.open("rb") as f:
                shutil.copyfileobj(f, dst)
        except FileNotFoundError:
            raise NotFoundError(f"file not found: {remote_path}", stage="store") from None
        except OSError as e:
            raise BackupIOError(f"failed to read {remote_path}: {e}", stage="store") from e
        check(ctx)

    def delete(self, remote_path: str, ctx: Optional[OperationContext] = None) -> None:
        check(ctx)
        full = self._full_path(remote_path)
        try:
            full.unlink()
        except FileNotFoundError:
            raise NotFoundError(f"file not found: {remote_path}", stage="store") from None
        except OSError as e:
            raise BackupIOError(f"failed to delete {remote_path}: {e}", stage="store") from e
        try:
            self._meta_path(full).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("could not remove metadata for %s: %s", remote_path, e)
        logger.debug("deleted %s", remote_path)
        check(ctx)

    def list(self, remote_path: str, ctx: Optional[OperationContext] = None) -> List[FileInfo]:
        check(ctx)
        full = self._full_path(remote_path)
        try:
            entries = sorted(os.scandir(full), key=lambda e: e.name)
        except FileNotFoundError:
            raise NotFoundError(f"directory not found: {remote_path}", stage="store") from None
        except OSError as e:
            raise BackupIOError(f"failed to read directory {remote_path}: {e}", stage="store") from e

        files: List[FileInfo] = []
        for entry in entries:
            if entry.name.endswith(META_SUFFIX):
                continue
            try:
                st = entry.stat()
                is_dir = entry.is_dir()
            except OSError:
                continue
            files.append(FileInfo(
                path=posixpath.join(remote_path or "/", entry.name),
                size=st.st_size,
                is_dir=is_dir,
                mod_time=int(st.st_mtime),
                metadata=self._load_metadata_quiet(Path(entry.path)),
            ))
        check(ctx)
        return files

    def exists(self, remote_path: str, ctx: Optional[OperationContext] = None) -> bool:
        check(ctx)
        full = self._full_path(remote_path)
        try:
            full.stat()
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise BackupIOError(f"failed to stat {remote_path}: {e}", stage="store") from e
        return True

    def get_metadata(self, remote_path: str, ctx: Optional[OperationContext] = None) -> Dict[str, str]:
        if not self.exists(remote_path, ctx):
            raise NotFoundError(f"file not found: {remote_path}", stage="store")
        metadata = self._load_metadata(self._full_path(remote_path))
        check(ctx)
        return metadata

    def _load_metadata(self, full: Path) -> Dict[str, str]:
        meta_path = self._meta_path(full)
        try:
            raw = meta_path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise BackupIOError(f"failed to read metadata: {e}", stage="store") from e
        try:
            obj = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FormatError(f"malformed metadata document: {e}", stage="store") from e
        try:
            return check_metadata(obj)
        except FormatError as e:
            e.stage = "store"
            raise

    def _load_metadata_quiet(self, full: Path) -> Dict[str, str]:
        try:
            return self._load_metadata(full)
        except (BackupIOError, FormatError) as e:
            logger.debug("ignoring unreadable metadata for %s: %s", full.name, e)
            return {}


register_store("local", LocalStore)
