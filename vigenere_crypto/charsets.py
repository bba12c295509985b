"""
Character sets
==============
The alphabets a VigenereCipher can work over.

A symbol's position in its alphabet is its numeric value for the modular
arithmetic, so the order of these strings is part of the ciphertext
format. Reordering a set breaks every file encrypted with it.

DEFAULT_CHAR_SET  : 97 symbols: digits, letters, space, tab, LF, CR and
                    the common punctuation. No backtick.
PRINTABLE_ASCII   : the 95 printable ASCII symbols, space (0x20) to
                    tilde (0x7E). No whitespace other than space.
"""

DEFAULT_CHAR_SET = (
    "0123456789"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    " \t\n\r"
    "~!@#$%^&*()_+-=[]\\{}|;':\",./<>?"
)

PRINTABLE_ASCII = "".join(chr(c) for c in range(0x20, 0x7F))

CHAR_SETS = {
    "default":   DEFAULT_CHAR_SET,
    "printable": PRINTABLE_ASCII,
}
