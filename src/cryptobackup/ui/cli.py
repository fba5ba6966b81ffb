import argparse
import sys

from typing import NoReturn, Optional

from cryptobackup.utils.core import cmd_download, cmd_list, cmd_upload
from cryptobackup.utils.maintain import cmd_delete, cmd_genkey, cmd_info, cmd_version
from cryptobackup.utils.settings import Settings, get_settings


class CliParser(argparse.ArgumentParser):
    """Usage errors go to stdout with the tool's ``[!]`` prefix and exit 1."""

    def error(self, message: str) -> NoReturn:
        print(f"[!] {message}")
        self.print_usage(sys.stdout)
        sys.exit(1)


def _flag(parser: argparse.ArgumentParser, name: str, **kwargs) -> None:
    # accept both -name and --name
    parser.add_argument(f"-{name}", f"--{name}", dest=name, **kwargs)


def _algo_and_storage(parser: argparse.ArgumentParser, settings: Settings, algo: bool = True) -> None:
    if algo:
        _flag(parser, "algo", default=settings.algorithm, choices=["aes", "xor"], help="Cipher (aes|xor)")
    _flag(parser, "storage", default=settings.storage_path, help="Storage root directory")


def build_parser(settings: Optional[Settings] = None) -> argparse.ArgumentParser:
    settings = settings or get_settings()
    p = CliParser(prog="cryptobackup", description="Encrypted file backup tool")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_up = sub.add_parser("upload", help="Encrypt and upload a file")
    _flag(p_up, "file", required=True, help="Local file to upload")
    _flag(p_up, "remote", required=True, help="Remote object path")
    _flag(p_up, "key", required=True, help="Key as hex")
    _algo_and_storage(p_up, settings)
    p_up.set_defaults(func=cmd_upload)

    p_down = sub.add_parser("download", help="Download and decrypt a file")
    _flag(p_down, "remote", required=True, help="Remote object path")
    _flag(p_down, "file", required=True, help="Local destination path")
    _flag(p_down, "key", required=True, help="Key as hex")
    _algo_and_storage(p_down, settings)
    p_down.set_defaults(func=cmd_download)

    p_ls = sub.add_parser("list", help="List remote files")
    _flag(p_ls, "path", default="/", help="Remote directory to list")
    _algo_and_storage(p_ls, settings, algo=False)
    p_ls.set_defaults(func=cmd_list)

    p_rm = sub.add_parser("delete", help="Delete a remote file")
    _flag(p_rm, "remote", required=True, help="Remote object path")
    _algo_and_storage(p_rm, settings, algo=False)
    p_rm.set_defaults(func=cmd_delete)

    p_info = sub.add_parser("info", help="Show stored metadata for a file")
    _flag(p_info, "remote", required=True, help="Remote object path")
    _algo_and_storage(p_info, settings, algo=False)
    p_info.set_defaults(func=cmd_info)

    p_key = sub.add_parser("genkey", help="Generate a random hex key")
    _flag(p_key, "size", type=int, default=settings.key_size, help="Key size in bytes (AES: 16/24/32)")
    p_key.set_defaults(func=cmd_genkey)

    p_ver = sub.add_parser("version", help="Show version")
    p_ver.set_defaults(func=cmd_version)

    p_help = sub.add_parser("help", help="Show this help")
    p_help.set_defaults(func=lambda _args: p.print_help())

    return p
