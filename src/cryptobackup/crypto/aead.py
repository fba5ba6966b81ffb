import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from typing import BinaryIO, Dict, Tuple

from cryptobackup.crypto.base import read_all, register_cipher, write_all
from cryptobackup.utils.dataModels import AES_KEY_SIZES, AES_NONCE_SIZE
from cryptobackup.utils.errors import AuthenticationError, ConstructionError, FormatError


def aead_encrypt(key: bytes, plaintext: bytes, aad: bytes | None = None) -> Tuple[bytes, bytes]:
    nonce = os.urandom(AES_NONCE_SIZE)
    aesgcm = AESGCM(key)
    ct = aesgcm.encrypt(nonce, plaintext, aad)
    return nonce, ct


def aead_decrypt(key: bytes, nonce: bytes, ct: bytes, aad: bytes | None = None) -> bytes:
    aesgcm = AESGCM(key)
    return aesgcm.decrypt(nonce, ct, aad)


class AESGCMCipher:
    """AES-GCM with a fresh random 12-byte nonce per call.

    Output framing is ``nonce || sealed``, where ``sealed`` carries the 16-byte tag.
    Plaintext is only written to ``dst`` after the tag verifies.
    """

    def __init__(self, key: bytes):
        if not isinstance(key, (bytes, bytearray)):
            raise ConstructionError("key must be bytes")
        if len(key) not in AES_KEY_SIZES:
            raise ConstructionError(f"invalid key size: {len(key)}, must be 16, 24 or 32 bytes")
        self._key = bytes(key)

    @property
    def key_bits(self) -> int:
        return len(self._key) * 8

    def encrypt(self, src: BinaryIO, dst: BinaryIO) -> None:
        plaintext = read_all(src)
        nonce, ct = aead_encrypt(self._key, plaintext)
        write_all(dst, nonce + ct)

    def decrypt(self, src: BinaryIO, dst: BinaryIO) -> None:
        blob = read_all(src)
        if len(blob) < AES_NONCE_SIZE:
            raise FormatError("ciphertext shorter than nonce", stage="cipher")
        nonce, ct = blob[:AES_NONCE_SIZE], blob[AES_NONCE_SIZE:]
        try:
            plaintext = aead_decrypt(self._key, nonce, ct)
        except InvalidTag:
            raise AuthenticationError("authentication failed", stage="cipher") from None
        write_all(dst, plaintext)

    def describe(self) -> Dict[str, str]:
        return {"algorithm": "AES-GCM", "key_size": str(self.key_bits)}


register_cipher("aes", AESGCMCipher)
