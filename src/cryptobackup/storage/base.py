from typing import Any, BinaryIO, Callable, Dict, List, Optional, Protocol, runtime_checkable

from cryptobackup.utils.context import OperationContext
from cryptobackup.utils.dataModels import FileInfo
from cryptobackup.utils.errors import ConstructionError


@runtime_checkable
class ObjectStore(Protocol):
    """Persistence keyed by slash-separated path: an opaque blob plus a str->str metadata map."""

    def upload(self, remote_path: str, data: BinaryIO, metadata: Optional[Dict[str, str]] = None,
               ctx: Optional[OperationContext] = None) -> None: ...

    def download(self, remote_path: str, dst: BinaryIO, ctx: Optional[OperationContext] = None) -> None: ...

    def delete(self, remote_path: str, ctx: Optional[OperationContext] = None) -> None: ...

    def list(self, remote_path: str, ctx: Optional[OperationContext] = None) -> List[FileInfo]: ...

    def exists(self, remote_path: str, ctx: Optional[OperationContext] = None) -> bool: ...

    def get_metadata(self, remote_path: str, ctx: Optional[OperationContext] = None) -> Dict[str, str]: ...


StoreFactory = Callable[..., ObjectStore]

_REGISTRY: Dict[str, StoreFactory] = {}


def register_store(kind: str, factory: StoreFactory) -> None:
    _REGISTRY[kind.lower()] = factory


def create_store(kind: str = "local", **options: Any) -> ObjectStore:
    from cryptobackup.storage import local  # noqa: F401

    factory = _REGISTRY.get(kind.lower())
    if factory is None:
        raise ConstructionError(f"unsupported storage type: {kind}")
    return factory(**options)
