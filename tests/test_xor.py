"""Tests for the XOR stream cipher."""
import io
import os

import pytest

from cryptobackup.crypto.base import decrypt_bytes, encrypt_bytes
from cryptobackup.crypto.xor import XORCipher
from cryptobackup.utils.errors import BackupIOError, ConstructionError


def test_empty_key_rejected():
    with pytest.raises(ConstructionError):
        XORCipher(b"")


@pytest.mark.parametrize("key_len", [1, 3, 7, 32, 5000])
@pytest.mark.parametrize("size", [0, 1, 4095, 4096, 4097, 10_000])
def test_round_trip(key_len, size):
    cipher = XORCipher(os.urandom(key_len))
    plaintext = os.urandom(size)
    blob = encrypt_bytes(cipher, plaintext)
    assert len(blob) == size
    assert decrypt_bytes(cipher, blob) == plaintext


def test_key_position_carries_across_chunks():
    """A 3-byte key over 4097 bytes must continue the cycle in the second chunk."""
    key = b"\x01\x02\x03"
    cipher = XORCipher(key)
    blob = encrypt_bytes(cipher, b"\x00" * 4097)
    expected = bytes(key[i % 3] for i in range(4097))
    assert blob == expected


def test_wrong_key_returns_garbage_without_error():
    """XOR cannot detect a wrong key; the round trip simply fails to match."""
    plaintext = b"the quick brown fox"
    blob = encrypt_bytes(XORCipher(b"right"), plaintext)
    assert decrypt_bytes(XORCipher(b"wrong"), blob) != plaintext


def test_describe():
    assert XORCipher(b"abcd").describe() == {"algorithm": "XOR", "key_size": "4"}


class _BrokenReader(io.RawIOBase):
    def readable(self):
        return True

    def read(self, n=-1):
        raise OSError("disk gone")


def test_read_failure_is_io_error():
    with pytest.raises(BackupIOError):
        XORCipher(b"k").encrypt(_BrokenReader(), io.BytesIO())
