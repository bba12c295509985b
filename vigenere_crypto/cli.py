"""
Command line: vigenere ACTION KEY TARGET

    vigenere encrypt    KEY "some text"     print the ciphertext
    vigenere decrypt    KEY "ciphertext"    print the plaintext
    vigenere encryptDir KEY path/to/dir     write path/to/dir.encrypted
    vigenere decryptDir KEY path/to/dir     write the .decrypted sibling

Actions are case-insensitive. An unknown action is reported but is not an
error. Wrong argument counts print usage and exit 2.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .charsets import CHAR_SETS
from .engine import VigenereCipher
from .errors import CipherError
from .mirror import TreeMirror

logger = logging.getLogger(__name__)

ACTIONS = ("encrypt", "decrypt", "encryptDir", "decryptDir")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vigenere",
        description="Vigenère cipher for text, files and directory trees.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    p.add_argument("action", help="One of: " + ", ".join(ACTIONS) + " (case-insensitive).")
    p.add_argument("key", help="Cipher key. Every symbol must be in the character set.")
    p.add_argument("target", help="Text for encrypt/decrypt, a directory for encryptDir/decryptDir.")

    p.add_argument(
        "--charset",
        choices=sorted(CHAR_SETS),
        default="default",
        help="Character set to encrypt over (default: %(default)s).",
    )
    p.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Directory actions: depth limit, root is 0 (default: unlimited).",
    )
    p.add_argument(
        "--encoding",
        default=VigenereCipher.ENCODING,
        help="Directory actions: text encoding of the files (default: %(default)s).",
    )
    p.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Directory actions: files processed in parallel (default: %(default)s).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log every entry.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=" %(message)s",
    )

    actions = {name.lower(): name for name in ACTIONS}
    action = actions.get(args.action.lower())
    if action is None:
        print(f"action [{args.action}] not implemented")
        return 0

    try:
        cipher = VigenereCipher(args.key, CHAR_SETS[args.charset], encoding=args.encoding)
        logger.debug(f"{action} [{args.target}] with {cipher!r}")

        if action == "encrypt":
            print(cipher.encrypt(args.target))
        elif action == "decrypt":
            print(cipher.decrypt(args.target))
        else:
            mirror = TreeMirror(cipher, max_depth=args.max_depth, workers=args.workers)
            if action == "encryptDir":
                report = mirror.mirror_encrypt(args.target)
            else:
                report = mirror.mirror_decrypt(args.target)
            print(f"{action} [{args.target}] DONE -> {report.destination}")
            if report.failed:
                print(f"  {len(report.failed)} entries failed, see log above")
    except CipherError as exc:
        print(f"{action}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
