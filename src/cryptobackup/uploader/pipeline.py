"""Encrypt-then-store pipeline binding one cipher to one object store."""
import io
import logging

from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, List, Optional

from cryptobackup.crypto.base import Cipher
from cryptobackup.storage.base import ObjectStore
from cryptobackup.utils.context import OperationContext, check
from cryptobackup.utils.dataModels import FileInfo
from cryptobackup.utils.errors import BackupIOError, CryptoBackupError, NotFoundError
from cryptobackup.utils.helper import rel_time_iso

logger = logging.getLogger(__name__)


@contextmanager
def stage(name: str) -> Iterator[None]:
    """Tag errors raised inside the block with the stage that produced them.

    Library errors keep their type; raw OSErrors become BackupIOError/NotFoundError.
    """
    try:
        yield
    except CryptoBackupError as e:
        if not e.stage:
            e.stage = name
        raise
    except FileNotFoundError as e:
        raise NotFoundError(f"{e.strerror}: {e.filename}", stage=name) from e
    except OSError as e:
        raise BackupIOError(str(e), stage=name) from e


class Uploader:
    """Whole-object pipeline: everything is buffered in memory between stages.

    Downloads decrypt into a buffer before anything reaches the caller, so
    unauthenticated plaintext is never released.
    """

    def __init__(self, cipher: Cipher, store: ObjectStore):
        self.cipher = cipher
        self.store = store

    def _encrypt(self, src: BinaryIO) -> bytes:
        out = io.BytesIO()
        with stage("cipher"):
            self.cipher.encrypt(src, out)
        return out.getvalue()

    def _fetch_plaintext(self, remote_path: str, ctx: Optional[OperationContext]) -> bytes:
        encrypted = io.BytesIO()
        with stage("store"):
            self.store.download(remote_path, encrypted, ctx=ctx)
        encrypted.seek(0)
        decrypted = io.BytesIO()
        with stage("cipher"):
            self.cipher.decrypt(encrypted, decrypted)
        check(ctx)
        return decrypted.getvalue()

    def _store(self, remote_path: str, encrypted: bytes, metadata: Dict[str, str],
               ctx: Optional[OperationContext]) -> None:
        with stage("store"):
            self.store.upload(remote_path, io.BytesIO(encrypted), metadata, ctx=ctx)

    def upload_file(self, local_path: str | Path, remote_path: str,
                    ctx: Optional[OperationContext] = None) -> None:
        check(ctx)
        src = Path(local_path)
        with stage("local"):
            plaintext = src.read_bytes()
        encrypted = self._encrypt(io.BytesIO(plaintext))

        metadata = self.cipher.describe()
        metadata["original_name"] = src.name
        metadata["original_size"] = str(len(plaintext))
        metadata["encrypted_size"] = str(len(encrypted))
        metadata["upload_time"] = rel_time_iso()

        check(ctx)
        self._store(remote_path, encrypted, metadata, ctx)
        logger.info("uploaded %s -> %s (%d bytes encrypted)", src.name, remote_path, len(encrypted))

    def download_file(self, remote_path: str, local_path: str | Path,
                      ctx: Optional[OperationContext] = None) -> None:
        check(ctx)
        plaintext = self._fetch_plaintext(remote_path, ctx)
        out = Path(local_path)
        with stage("local"):
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_bytes(plaintext)
        logger.info("downloaded %s -> %s", remote_path, out)

    def upload_stream(self, data: BinaryIO, remote_path: str, metadata: Optional[Dict[str, str]] = None,
                      ctx: Optional[OperationContext] = None) -> None:
        check(ctx)
        encrypted = self._encrypt(data)

        final = self.cipher.describe()
        final.update(metadata or {})
        final["encrypted_size"] = str(len(encrypted))
        final["upload_time"] = rel_time_iso()

        check(ctx)
        self._store(remote_path, encrypted, final, ctx)
        logger.info("uploaded stream -> %s (%d bytes encrypted)", remote_path, len(encrypted))

    def download_stream(self, remote_path: str, dst: BinaryIO,
                        ctx: Optional[OperationContext] = None) -> None:
        check(ctx)
        plaintext = self._fetch_plaintext(remote_path, ctx)
        with stage("local"):
            dst.write(plaintext)

    def list_files(self, remote_path: str, ctx: Optional[OperationContext] = None) -> List[FileInfo]:
        with stage("store"):
            return self.store.list(remote_path, ctx=ctx)

    def delete_file(self, remote_path: str, ctx: Optional[OperationContext] = None) -> None:
        with stage("store"):
            self.store.delete(remote_path, ctx=ctx)
        logger.info("deleted %s", remote_path)

    def get_file_info(self, remote_path: str, ctx: Optional[OperationContext] = None) -> Dict[str, str]:
        with stage("store"):
            return self.store.get_metadata(remote_path, ctx=ctx)

    def exists(self, remote_path: str, ctx: Optional[OperationContext] = None) -> bool:
        with stage("store"):
            return self.store.exists(remote_path, ctx=ctx)
