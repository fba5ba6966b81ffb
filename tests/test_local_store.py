"""Tests for the local filesystem object store."""
import io
import json

import pytest

from cryptobackup.storage.base import ObjectStore, create_store
from cryptobackup.storage.local import LocalStore
from cryptobackup.utils.context import OperationContext
from cryptobackup.utils.errors import (
    BackupIOError,
    ConstructionError,
    FormatError,
    NotFoundError,
    OperationCancelled,
    UnsafePathError,
)


def _read(store, path):
    out = io.BytesIO()
    store.download(path, out)
    return out.getvalue()


def test_base_directory_created(tmp_path):
    base = tmp_path / "a" / "b"
    LocalStore(base)
    assert base.is_dir()


def test_empty_base_path_rejected():
    with pytest.raises(ConstructionError):
        LocalStore("")


def test_factory_builds_local(tmp_path):
    store = create_store("local", base_path=tmp_path)
    assert isinstance(store, LocalStore)
    assert isinstance(store, ObjectStore)
    with pytest.raises(ConstructionError):
        create_store("baidu")


def test_upload_download_creates_hierarchy(store):
    store.upload("/a/b/c.bin", io.BytesIO(b"payload"), {"k": "v"})
    assert (store.base_path / "a" / "b" / "c.bin").read_bytes() == b"payload"
    meta = json.loads((store.base_path / "a" / "b" / "c.bin.meta").read_text())
    assert meta == {"k": "v"}
    assert _read(store, "/a/b/c.bin") == b"payload"


def test_upload_overwrites(store):
    store.upload("x", io.BytesIO(b"first version"), {"v": "1"})
    store.upload("x", io.BytesIO(b"second"), {"v": "2"})
    assert _read(store, "x") == b"second"
    assert store.get_metadata("x") == {"v": "2"}


def test_reupload_without_metadata_clears_sidecar(store):
    store.upload("x", io.BytesIO(b"1"), {"v": "1"})
    store.upload("x", io.BytesIO(b"2"), {})
    assert store.get_metadata("x") == {}


def test_download_missing(store):
    with pytest.raises(NotFoundError):
        _read(store, "/nope")


def test_download_directory_is_io_error(store):
    store.upload("/dir/f", io.BytesIO(b"x"))
    with pytest.raises(BackupIOError):
        _read(store, "/dir")


def test_list_excludes_metadata(store):
    store.upload("/a/b.txt", io.BytesIO(b"data"), {"k": "v"})
    entries = store.list("/a")
    assert len(entries) == 1
    entry = entries[0]
    assert entry.path == "/a/b.txt"
    assert entry.size == 4
    assert entry.is_dir is False
    assert entry.metadata == {"k": "v"}
    assert entry.mod_time > 0


def test_list_directories_and_order(store):
    store.upload("/z.bin", io.BytesIO(b"1"))
    store.upload("/m/inner.bin", io.BytesIO(b"22"))
    store.upload("/a.bin", io.BytesIO(b"333"), {"x": "y"})
    entries = store.list("/")
    assert [e.path for e in entries] == ["/a.bin", "/m", "/z.bin"]
    assert [e.is_dir for e in entries] == [False, True, False]
    assert entries[1].metadata == {}
    assert entries[2].metadata == {}


def test_list_is_not_recursive(store):
    store.upload("/a/b/c/d.bin", io.BytesIO(b"x"))
    assert [e.path for e in store.list("/a")] == ["/a/b"]


def test_list_tolerates_broken_metadata(store):
    store.upload("/f.bin", io.BytesIO(b"x"), {"k": "v"})
    (store.base_path / "f.bin.meta").write_text("{not json")
    entries = store.list("/")
    assert len(entries) == 1
    assert entries[0].metadata == {}


def test_list_missing_directory(store):
    with pytest.raises(NotFoundError):
        store.list("/missing")


def test_list_file_is_io_error(store):
    store.upload("/f.bin", io.BytesIO(b"x"))
    with pytest.raises(BackupIOError):
        store.list("/f.bin")


def test_exists(store):
    assert store.exists("/nothing") is False
    store.upload("/f.bin", io.BytesIO(b"x"))
    assert store.exists("/f.bin") is True
    assert store.exists("/f.bin/child") is False


def test_get_metadata_without_sidecar(store):
    store.upload("/f.bin", io.BytesIO(b"x"), {})
    assert store.get_metadata("/f.bin") == {}


def test_get_metadata_missing_object(store):
    with pytest.raises(NotFoundError):
        store.get_metadata("/nope")


def test_get_metadata_malformed(store):
    store.upload("/f.bin", io.BytesIO(b"x"), {"k": "v"})
    (store.base_path / "f.bin.meta").write_text('{"k": 1}')
    with pytest.raises(FormatError):
        store.get_metadata("/f.bin")
    (store.base_path / "f.bin.meta").write_text("[]")
    with pytest.raises(FormatError):
        store.get_metadata("/f.bin")


def test_delete_removes_both(store):
    store.upload("/f.bin", io.BytesIO(b"x"), {"k": "v"})
    store.delete("/f.bin")
    assert not (store.base_path / "f.bin").exists()
    assert not (store.base_path / "f.bin.meta").exists()
    assert store.exists("/f.bin") is False


def test_delete_without_sidecar(store):
    store.upload("/f.bin", io.BytesIO(b"x"))
    store.delete("/f.bin")
    assert store.exists("/f.bin") is False


def test_delete_missing(store):
    with pytest.raises(NotFoundError):
        store.delete("/nope")


def test_traversal_followed_by_default(tmp_path):
    store = LocalStore(tmp_path / "root")
    store.upload("../outside.bin", io.BytesIO(b"x"))
    assert (tmp_path / "outside.bin").read_bytes() == b"x"


def test_confined_store_rejects_traversal(tmp_path):
    store = LocalStore(tmp_path / "root", confine=True)
    with pytest.raises(UnsafePathError):
        store.upload("../outside.bin", io.BytesIO(b"x"))
    store.upload("/inside/ok.bin", io.BytesIO(b"x"))
    assert store.exists("inside/ok.bin")


def test_cancelled_context(store):
    ctx = OperationContext()
    ctx.cancel()
    with pytest.raises(OperationCancelled):
        store.upload("/f.bin", io.BytesIO(b"x"), ctx=ctx)
    assert store.exists("/f.bin") is False


def test_expired_deadline(store):
    ctx = OperationContext(timeout=0)
    assert ctx.cancelled
    assert ctx.remaining() == 0.0
    with pytest.raises(OperationCancelled):
        store.list("/", ctx=ctx)


def test_tmp_named_object_survives_sibling_upload(store):
    """Writing /a must not touch a caller object called /a.tmp."""
    store.upload("/a.tmp", io.BytesIO(b"user object"), {"k": "v"})
    store.upload("/a", io.BytesIO(b"other"), {"k": "w"})
    assert _read(store, "/a.tmp") == b"user object"
    assert store.get_metadata("/a.tmp") == {"k": "v"}
    assert _read(store, "/a") == b"other"
    assert [e.path for e in store.list("/")] == ["/a", "/a.tmp"]


def test_list_shows_tmp_named_object(store):
    store.upload("/report.tmp", io.BytesIO(b"x"), {"k": "v"})
    entries = store.list("/")
    assert [e.path for e in entries] == ["/report.tmp"]
    assert entries[0].metadata == {"k": "v"}


def test_failed_sidecar_write_keeps_previous_object(store):
    store.upload("/x", io.BytesIO(b"old"), {"v": "1"})
    meta = store.base_path / "x.meta"
    meta.unlink()
    meta.mkdir()
    with pytest.raises(BackupIOError):
        store.upload("/x", io.BytesIO(b"new"), {"v": "2"})
    assert _read(store, "/x") == b"old"
    # no temp files left behind
    assert sorted(p.name for p in store.base_path.iterdir()) == ["x", "x.meta"]
