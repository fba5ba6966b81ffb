import io

from typing import BinaryIO, Callable, Dict, Protocol, runtime_checkable

from cryptobackup.utils.errors import BackupIOError, ConstructionError


@runtime_checkable
class Cipher(Protocol):
    """Stream encryption unit. Implementations hold only their immutable key."""

    def encrypt(self, src: BinaryIO, dst: BinaryIO) -> None: ...

    def decrypt(self, src: BinaryIO, dst: BinaryIO) -> None: ...

    def describe(self) -> Dict[str, str]: ...


CipherFactory = Callable[[bytes], Cipher]

_REGISTRY: Dict[str, CipherFactory] = {}


def register_cipher(algorithm: str, factory: CipherFactory) -> None:
    _REGISTRY[algorithm.lower()] = factory


def create_cipher(algorithm: str, key: bytes) -> Cipher:
    # import for registration side effects
    from cryptobackup.crypto import aead, xor  # noqa: F401

    factory = _REGISTRY.get(algorithm.lower())
    if factory is None:
        raise ConstructionError(f"unsupported algorithm: {algorithm}")
    return factory(key)


def available_algorithms() -> list[str]:
    from cryptobackup.crypto import aead, xor  # noqa: F401

    return sorted(_REGISTRY)


def read_all(src: BinaryIO) -> bytes:
    try:
        return src.read()
    except OSError as e:
        raise BackupIOError(f"failed to read source data: {e}", stage="cipher") from e


def write_all(dst: BinaryIO, data: bytes) -> None:
    try:
        dst.write(data)
    except OSError as e:
        raise BackupIOError(f"failed to write output data: {e}", stage="cipher") from e


def encrypt_bytes(cipher: Cipher, plaintext: bytes) -> bytes:
    out = io.BytesIO()
    cipher.encrypt(io.BytesIO(plaintext), out)
    return out.getvalue()


def decrypt_bytes(cipher: Cipher, ciphertext: bytes) -> bytes:
    out = io.BytesIO()
    cipher.decrypt(io.BytesIO(ciphertext), out)
    return out.getvalue()
