import argparse

from cryptobackup.crypto.base import create_cipher
from cryptobackup.storage.base import create_store
from cryptobackup.uploader.pipeline import Uploader
from cryptobackup.utils.helper import decode_key
from cryptobackup.utils.settings import get_settings


def open_store(storage_path: str):
    return create_store("local", base_path=storage_path, confine=get_settings().confine_paths)


def open_uploader(args: argparse.Namespace) -> Uploader:
    cipher = create_cipher(args.algo, decode_key(args.key))
    return Uploader(cipher, open_store(args.storage))


def cmd_upload(args: argparse.Namespace) -> None:
    ul = open_uploader(args)
    print(f"[+] Encrypting and uploading {args.file} -> {args.remote}")
    ul.upload_file(args.file, args.remote)
    print("[+] Upload complete")


def cmd_download(args: argparse.Namespace) -> None:
    ul = open_uploader(args)
    print(f"[+] Downloading and decrypting {args.remote} -> {args.file}")
    ul.download_file(args.remote, args.file)
    print("[+] Download complete")


def cmd_list(args: argparse.Namespace) -> None:
    files = open_store(args.storage).list(args.path)
    if not files:
        print("(empty)")
        return
    print(f"Path: {args.path}")
    print("-" * 40)
    for f in files:
        name = f.path.rsplit("/", 1)[-1]
        if f.is_dir:
            print(f"[DIR]  {name}")
        else:
            print(f"[FILE] {name} ({f.size} bytes)")
