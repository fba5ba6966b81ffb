import os

import pytest

from cryptobackup.crypto.aead import AESGCMCipher
from cryptobackup.storage.local import LocalStore
from cryptobackup.uploader.pipeline import Uploader


@pytest.fixture
def aes_key():
    return os.urandom(32)


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "backup")


@pytest.fixture
def uploader(store, aes_key):
    return Uploader(AESGCMCipher(aes_key), store)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CRYPTOBACKUP_* variables from the host out of settings."""
    for name in list(os.environ):
        if name.startswith("CRYPTOBACKUP_"):
            monkeypatch.delenv(name)
