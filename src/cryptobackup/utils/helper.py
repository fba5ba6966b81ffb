import binascii
import datetime as _dt

from typing import Dict, Any

from cryptobackup.utils.errors import ConstructionError, FormatError


def rel_time_iso(ts: float | None = None) -> str:
    """RFC 3339 UTC timestamp, second precision; now when ``ts`` is None."""
    if ts is None:
        moment = _dt.datetime.now(_dt.timezone.utc)
    else:
        moment = _dt.datetime.fromtimestamp(ts, _dt.timezone.utc)
    return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def decode_key(key_hex: str) -> bytes:
    try:
        return binascii.unhexlify(key_hex.strip())
    except (binascii.Error, ValueError):
        # never echo the key text back
        raise ConstructionError("invalid key format, must be a hex string") from None


def encode_key(key: bytes) -> str:
    return binascii.hexlify(key).decode("ascii")


def check_metadata(obj: Any) -> Dict[str, str]:
    """Validate a decoded sidecar document: flat object of string keys to string values."""
    if not isinstance(obj, dict):
        raise FormatError("metadata document must be a JSON object")
    for k, v in obj.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise FormatError("metadata document must map strings to strings")
    return dict(obj)
