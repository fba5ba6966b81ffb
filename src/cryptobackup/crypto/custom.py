from typing import BinaryIO, Callable, Dict, Optional

from cryptobackup.utils.errors import ConstructionError

StreamFunc = Callable[[BinaryIO, BinaryIO], None]


class CustomCipher:
    """Cipher assembled from caller-supplied callables.

    Lets an application plug in its own scheme without defining a class.
    """

    def __init__(
        self,
        name: str,
        encrypt: Optional[StreamFunc] = None,
        decrypt: Optional[StreamFunc] = None,
        describe: Optional[Callable[[], Dict[str, str]]] = None,
    ):
        if not name:
            raise ConstructionError("custom cipher needs a name")
        self.name = name
        self._encrypt = encrypt
        self._decrypt = decrypt
        self._describe = describe

    def encrypt(self, src: BinaryIO, dst: BinaryIO) -> None:
        if self._encrypt is None:
            raise ConstructionError("encrypt function not implemented", stage="cipher")
        self._encrypt(src, dst)

    def decrypt(self, src: BinaryIO, dst: BinaryIO) -> None:
        if self._decrypt is None:
            raise ConstructionError("decrypt function not implemented", stage="cipher")
        self._decrypt(src, dst)

    def describe(self) -> Dict[str, str]:
        if self._describe is None:
            return {"algorithm": self.name}
        return dict(self._describe())
