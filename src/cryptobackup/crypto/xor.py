from typing import BinaryIO, Dict

from cryptobackup.crypto.base import register_cipher
from cryptobackup.utils.dataModels import XOR_CHUNK_SIZE
from cryptobackup.utils.errors import BackupIOError, ConstructionError


class XORCipher:
    """Repeating-key XOR. Demonstration only: no confidentiality worth the name.

    Encrypt and decrypt are the same operation. A wrong key does not raise,
    it silently yields garbage, so a failed round trip is the only signal.
    """

    def __init__(self, key: bytes):
        if not isinstance(key, (bytes, bytearray)):
            raise ConstructionError("key must be bytes")
        if len(key) == 0:
            raise ConstructionError("key cannot be empty")
        self._key = bytes(key)

    def encrypt(self, src: BinaryIO, dst: BinaryIO) -> None:
        self._xor_stream(src, dst)

    def decrypt(self, src: BinaryIO, dst: BinaryIO) -> None:
        self._xor_stream(src, dst)

    def _keystream(self, offset: int, n: int) -> bytes:
        key_len = len(self._key)
        start = offset % key_len
        reps = (start + n) // key_len + 1
        return (self._key * reps)[start:start + n]

    def _xor_stream(self, src: BinaryIO, dst: BinaryIO) -> None:
        # position runs across chunks; resetting it per chunk breaks short keys
        position = 0
        while True:
            try:
                chunk = src.read(XOR_CHUNK_SIZE)
            except OSError as e:
                raise BackupIOError(f"failed to read data: {e}", stage="cipher") from e
            if not chunk:
                break
            n = len(chunk)
            ks = self._keystream(position, n)
            out = (int.from_bytes(chunk, "big") ^ int.from_bytes(ks, "big")).to_bytes(n, "big")
            position += n
            try:
                dst.write(out)
            except OSError as e:
                raise BackupIOError(f"failed to write data: {e}", stage="cipher") from e

    def describe(self) -> Dict[str, str]:
        return {"algorithm": "XOR", "key_size": str(len(self._key))}


register_cipher("xor", XORCipher)
