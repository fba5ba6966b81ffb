#!/usr/bin/env python3
"""
cryptobackup: encrypt files under a caller-supplied key and keep them in an object store.

Layout of a local store:
  <storage>/
    <remote path>          # raw ciphertext (AES-GCM: 12-byte nonce || sealed data || 16-byte tag)
    <remote path>.meta     # flat JSON object, string -> string

Commands:
  upload     Encrypt a local file and store it
  download   Fetch and decrypt a stored file
  list       List a remote directory
  delete     Remove a stored file and its metadata
  info       Show stored metadata
  genkey     Print a random hex key
  version    Show version
  help       Show usage

Keys are never stored. Losing the key means losing the data.
"""
from __future__ import annotations

import logging
import sys

from typing import Optional, Sequence

from cryptobackup.ui.cli import build_parser
from cryptobackup.utils.errors import CryptoBackupError
from cryptobackup.utils.settings import get_settings


def main(argv: Optional[Sequence[str]] = None) -> None:
    settings = get_settings()
    parser = build_parser(settings)
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except CryptoBackupError as e:
        print(f"[!] {args.cmd} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
