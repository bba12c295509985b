"""
Transform Engine: Vigenère Polyalphabetic Cipher
=================================================
Classic repeating-key Vigenère over an arbitrary ordered character set.

Each symbol's position in the character set is its value. Encryption adds
the value of the current key symbol (mod set size), decryption subtracts
it. Symbols outside the set are copied as-is and do not consume key, so
line endings, control characters and undecodable bytes survive a round
trip without knocking the key out of step.

The key position lives in a CipherState, not on the cipher. A cipher can
be shared freely between threads; each message (a string, a file) gets
its own state, and a message processed in chunks passes the same state to
every chunk.

Not secure. Small alphabet, periodic key, no authentication. Kasiski and
Friedman analysis recover the key from a few hundred characters.

Dependencies: cryptography >= 41.0   (key fingerprint for logs)
"""

import logging
from dataclasses import dataclass
from typing import MutableSequence, Optional, Union

from cryptography.hazmat.primitives import hashes

from .charsets import DEFAULT_CHAR_SET
from .errors import ConfigurationError, InvalidArgumentError

logger = logging.getLogger(__name__)

Buffer = Union[str, MutableSequence[str]]


@dataclass
class CipherState:
    """Offset into the key for one logical message."""

    cursor: int = 0


class VigenereCipher:
    """
    Repeating-key Vigenère cipher over a configurable character set.

    Works on strings, on mutable sequences of single characters (in place),
    and on text files streamed in chunks.
    """

    CHAR_SET   = DEFAULT_CHAR_SET
    CHUNK_SIZE = 1024 * 1024          # characters per read
    ENCODING   = "utf-8"
    ERRORS     = "surrogateescape"    # undecodable bytes pass through

    def __init__(self, key: str, char_set: str = None, encoding: str = None):
        """
        key      : non-empty, every symbol must be in char_set
        char_set : ordered distinct symbols, defaults to CHAR_SET
        encoding : text encoding for the file transforms
        """
        if char_set is None:
            char_set = self.CHAR_SET
        if not char_set:
            raise ConfigurationError("Please provide a character set before using VigenereCipher.")
        if not key:
            raise ConfigurationError("Please provide a key before using VigenereCipher.")

        index = {}
        for pos, symbol in enumerate(char_set):
            if symbol in index:
                raise ConfigurationError(
                    f"Character set repeats {symbol!r} at positions {index[symbol]} and {pos}."
                )
            index[symbol] = pos

        outside = [pos for pos, symbol in enumerate(key) if symbol not in index]
        if outside:
            raise ConfigurationError(
                f"Key symbols at positions {outside} are not in the character set."
            )

        self._char_set = char_set
        self._index    = index
        self._shifts   = tuple(index[symbol] for symbol in key)
        self._encoding = encoding or self.ENCODING
        self._fingerprint = self._digest(key)
        logger.debug(f"VigenereCipher: {len(char_set)} symbols, key={self._fingerprint}")

    @staticmethod
    def _digest(key: str) -> str:
        h = hashes.Hash(hashes.SHA256())
        h.update(key.encode("utf-8", "surrogatepass"))
        return h.finalize().hex()[:12]

    @property
    def char_set(self) -> str:
        return self._char_set

    @property
    def key_length(self) -> int:
        return len(self._shifts)

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def key_fingerprint(self) -> str:
        """First 12 hex digits of SHA-256(key). Safe to log."""
        return self._fingerprint

    def new_state(self) -> CipherState:
        return CipherState()

    # ── buffers ──────────────────────────────────────────────────────────────

    def _prepare(self, buffer: Buffer, length: Optional[int],
                 state: Optional[CipherState]):
        if buffer is None:
            raise InvalidArgumentError("Buffer to transform must not be None.")
        if isinstance(buffer, (bytes, bytearray, memoryview)):
            raise InvalidArgumentError("Buffer must hold characters; decode bytes first.")
        size = len(buffer)
        if length is None:
            length = size
        elif length < 0 or length > size:
            raise InvalidArgumentError(f"Length {length} is outside a buffer of {size}.")
        if state is None:
            state = self.new_state()
        elif not 0 <= state.cursor < len(self._shifts):
            raise InvalidArgumentError(
                f"Cursor {state.cursor} is outside a key of length {len(self._shifts)}."
            )
        chars = list(buffer) if isinstance(buffer, str) else buffer
        return chars, length, state

    def encode(self, buffer: Buffer, length: int = None,
               state: CipherState = None) -> Buffer:
        """
        Encrypt the first `length` symbols of buffer.

        A list is changed in place and returned; a str yields a new str.
        Without a state the call is a message of its own (cursor 0);
        pass one state to consecutive calls to continue the keystream.
        """
        chars, length, state = self._prepare(buffer, length, state)
        alphabet = self._char_set
        index    = self._index
        shifts   = self._shifts
        size     = len(alphabet)
        cursor   = state.cursor
        for i in range(length):
            col = index.get(chars[i], -1)
            if col >= 0:
                chars[i] = alphabet[(col + shifts[cursor]) % size]
                cursor = (cursor + 1) % len(shifts)
        state.cursor = cursor
        return "".join(chars) if isinstance(buffer, str) else chars

    def decode(self, buffer: Buffer, length: int = None,
               state: CipherState = None) -> Buffer:
        """Inverse of encode(); same buffer, length and state rules."""
        chars, length, state = self._prepare(buffer, length, state)
        alphabet = self._char_set
        index    = self._index
        shifts   = self._shifts
        size     = len(alphabet)
        cursor   = state.cursor
        for i in range(length):
            col = index.get(chars[i], -1)
            if col >= 0:
                row = shifts[cursor]
                if row > col:
                    chars[i] = alphabet[col + size - row]
                else:
                    chars[i] = alphabet[col - row]
                cursor = (cursor + 1) % len(shifts)
        state.cursor = cursor
        return "".join(chars) if isinstance(buffer, str) else chars

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a whole string as one message."""
        if not isinstance(plaintext, str):
            raise InvalidArgumentError("Plaintext must be a str.")
        return self.encode(plaintext)

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a whole string as one message."""
        if not isinstance(ciphertext, str):
            raise InvalidArgumentError("Ciphertext must be a str.")
        return self.decode(ciphertext)

    # ── files ────────────────────────────────────────────────────────────────

    def encrypt_file(self, input_path, output_path, chunk_size: int = None) -> int:
        """
        Stream input_path through encode() into output_path.
        Returns the number of characters processed.
        Raises OSError if either file cannot be opened, read or written;
        a partially written output file is left in place.
        """
        return self._transform_file(self.encode, input_path, output_path, chunk_size)

    def decrypt_file(self, input_path, output_path, chunk_size: int = None) -> int:
        """Stream input_path through decode() into output_path."""
        return self._transform_file(self.decode, input_path, output_path, chunk_size)

    def _transform_file(self, transform, input_path, output_path, chunk_size) -> int:
        if input_path is None or output_path is None:
            raise InvalidArgumentError("Both an input and an output path are required.")
        if chunk_size is None:
            chunk_size = self.CHUNK_SIZE
        if chunk_size <= 0:
            raise InvalidArgumentError(f"Chunk size must be positive, got {chunk_size}.")

        # newline="" keeps CR/LF exactly as stored; both are cipher symbols
        opts  = dict(encoding=self._encoding, errors=self.ERRORS, newline="")
        state = self.new_state()
        total = 0
        with open(input_path, "r", **opts) as src, open(output_path, "w", **opts) as dst:
            while True:
                chunk = src.read(chunk_size)
                if not chunk:
                    break
                dst.write(transform(chunk, state=state))
                total += len(chunk)
        logger.debug(f"{transform.__name__}: {input_path} -> {output_path} ({total} chars)")
        return total

    def __repr__(self):
        return f"VigenereCipher(symbols={len(self._char_set)}, key={self._fingerprint})"
