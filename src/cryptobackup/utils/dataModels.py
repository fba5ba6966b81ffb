from dataclasses import dataclass, field, asdict
from typing import Dict, Any

VERSION = "1.0.0"

AES_NONCE_SIZE = 12
AES_TAG_SIZE = 16
AES_KEY_SIZES = (16, 24, 32)

XOR_CHUNK_SIZE = 4096

META_SUFFIX = ".meta"
TMP_SUFFIX = ".tmp"

DEFAULT_STORAGE_PATH = "./backup"
DEFAULT_ALGORITHM = "aes"
DEFAULT_KEY_SIZE = 32


@dataclass
class FileInfo:
    path: str
    size: int
    is_dir: bool
    mod_time: int  # seconds since epoch
    metadata: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
