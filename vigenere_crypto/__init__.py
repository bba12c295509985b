"""
vigenere_crypto
===============
Repeating-key Vigenère cipher for text, files and whole directory trees.

Layers:
    charsets  : the alphabets (97-symbol default, 95 printable ASCII)
    engine    : VigenereCipher: buffer, string and streamed-file transforms
    mirror    : TreeMirror: encrypt/decrypt a directory into a sibling tree
    cli       : `vigenere ACTION KEY TARGET`

A classical cipher. It keeps casual eyes off text files; it does not
protect them from anyone who wants to read them.
"""

__version__ = "1.0.0"

from .charsets import DEFAULT_CHAR_SET, PRINTABLE_ASCII, CHAR_SETS
from .errors   import (CipherError, ConfigurationError, InvalidArgumentError,
                       EnumerationError)
from .engine   import CipherState, VigenereCipher
from .mirror   import (TreeMirror, TreeEntry, EntryResult, MirrorReport,
                       iter_tree, encrypted_destination, decrypted_destination,
                       mirror_encrypt, mirror_decrypt)

__all__ = [
    "DEFAULT_CHAR_SET",
    "PRINTABLE_ASCII",
    "CHAR_SETS",
    "CipherError",
    "ConfigurationError",
    "InvalidArgumentError",
    "EnumerationError",
    "CipherState",
    "VigenereCipher",
    "TreeMirror",
    "TreeEntry",
    "EntryResult",
    "MirrorReport",
    "iter_tree",
    "encrypted_destination",
    "decrypted_destination",
    "mirror_encrypt",
    "mirror_decrypt",
]
