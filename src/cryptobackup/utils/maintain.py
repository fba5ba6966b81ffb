import argparse
import os

from cryptobackup.utils.core import open_store
from cryptobackup.utils.dataModels import VERSION
from cryptobackup.utils.errors import ConstructionError
from cryptobackup.utils.helper import encode_key


def cmd_delete(args: argparse.Namespace) -> None:
    print(f"[+] Deleting {args.remote}")
    open_store(args.storage).delete(args.remote)
    print("[+] Deleted")


def cmd_info(args: argparse.Namespace) -> None:
    metadata = open_store(args.storage).get_metadata(args.remote)
    print(f"File: {args.remote}")
    print("-" * 40)
    for k in sorted(metadata):
        print(f"{k}: {metadata[k]}")


def cmd_genkey(args: argparse.Namespace) -> None:
    if args.size < 1:
        raise ConstructionError(f"key size must be at least 1 byte, got {args.size}")
    key = os.urandom(args.size)
    print(f"[+] Generated {args.size}-byte key:")
    print(encode_key(key))
    print("Keep this key safe: files encrypted with it cannot be recovered without it.")


def cmd_version(args: argparse.Namespace) -> None:
    print(f"cryptobackup version {VERSION}")
