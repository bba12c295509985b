"""
Tree Mirror
===========
Encrypt or decrypt every file under a directory into a sibling tree.

    photos/                  ->  photos.encrypted/
    photos.encrypted/        ->  photos.decrypted/
    photos.encrypted.bak/    ->  photos.bak.decrypted/

The destination root is named after the source leaf: ".encrypted" is
appended when encrypting; when decrypting the first literal ".encrypted"
is removed and ".decrypted" appended. Every path below the root keeps its
name, only the root prefix changes.

The walk runs in two steps. The tree is listed first, so a missing or
unreadable source root fails before anything is written. Then each entry
is processed on its own: a file that cannot be read or written is logged
and recorded in the MirrorReport, and the rest of the tree carries on.

Each file starts from a fresh CipherState, so files are independent and
can be processed by a thread pool (workers > 1).
"""

import errno
import functools
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

from .engine import VigenereCipher
from .errors import EnumerationError, InvalidArgumentError

logger = logging.getLogger(__name__)

ENCRYPTED_SUFFIX = ".encrypted"
DECRYPTED_SUFFIX = ".decrypted"


def _absolute(source) -> str:
    if source is None:
        raise InvalidArgumentError("Source directory must not be None.")
    return os.path.abspath(os.fspath(source))


def encrypted_destination(source) -> str:
    """Sibling of source named '<leaf>.encrypted'."""
    parent, leaf = os.path.split(_absolute(source))
    return os.path.join(parent, leaf + ENCRYPTED_SUFFIX)


def decrypted_destination(source) -> str:
    """Sibling of source with the first '.encrypted' dropped and '.decrypted' added."""
    parent, leaf = os.path.split(_absolute(source))
    return os.path.join(parent, leaf.replace(ENCRYPTED_SUFFIX, "", 1) + DECRYPTED_SUFFIX)


# ── enumeration ──────────────────────────────────────────────────────────────

def _listdir(path: str) -> list:
    with os.scandir(path) as it:
        return sorted(it, key=lambda entry: entry.name)


def iter_tree(root, max_depth: int = None, follow_links: bool = False,
              onerror: Callable[[str, OSError], None] = None) -> Iterator[Tuple[str, bool]]:
    """
    Yield (path, is_dir) for root and everything below it, top-down.

    The root is depth 0, so max_depth=0 yields the root alone; None means
    no limit. A symlink to a directory is reported as a directory but only
    descended into when follow_links is set.

    Raises EnumerationError if root is not a listable directory. Failures
    to list a nested directory go to onerror(path, exc) when given,
    otherwise they raise EnumerationError too.
    """
    if max_depth is not None and max_depth < 0:
        raise InvalidArgumentError(f"max_depth must be >= 0, got {max_depth}.")
    root = os.fspath(root)
    if not os.path.exists(root):
        raise EnumerationError(errno.ENOENT, "No such directory", root)
    if not os.path.isdir(root):
        raise EnumerationError(errno.ENOTDIR, "Not a directory", root)
    try:
        top = _listdir(root)
    except OSError as exc:
        raise EnumerationError(exc.errno, f"Cannot list directory: {exc.strerror}", root) from exc

    yield root, True
    if max_depth == 0:
        return
    seen = frozenset([os.path.realpath(root)]) if follow_links else frozenset()
    yield from _descend(top, max_depth, follow_links, onerror, seen)


def _descend(entries, max_depth, follow_links, onerror, seen):
    # explicit stack of (entries, depth, seen) so depth is not bounded by recursion
    stack = [(iter(entries), 1, seen)]
    while stack:
        pending, depth, seen = stack[-1]
        entry = next(pending, None)
        if entry is None:
            stack.pop()
            continue
        try:
            is_dir = entry.is_dir()
            is_link = entry.is_symlink()
        except OSError:
            is_dir, is_link = False, False
        yield entry.path, is_dir

        if not is_dir or (is_link and not follow_links):
            continue
        if max_depth is not None and depth >= max_depth:
            continue

        real = os.path.realpath(entry.path) if follow_links else None
        try:
            if real in seen:
                raise OSError(errno.ELOOP, "Directory cycle", entry.path)
            children = _listdir(entry.path)
        except OSError as exc:
            if onerror is None:
                raise EnumerationError(exc.errno, f"Cannot list directory: {exc.strerror}",
                                       entry.path) from exc
            onerror(entry.path, exc)
            continue
        branch = seen | {real} if follow_links else seen
        stack.append((iter(children), depth + 1, branch))


# ── results ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TreeEntry:
    source: str
    destination: str
    is_dir: bool


@dataclass(frozen=True)
class EntryResult:
    entry: TreeEntry
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class MirrorReport:
    """Outcome of one mirror operation, one EntryResult per attempt."""

    source: str
    destination: str
    results: List[EntryResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[EntryResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[EntryResult]:
        return [r for r in self.results if not r.ok]

    @property
    def files(self) -> List[str]:
        """Destination paths of files written successfully."""
        return [r.entry.destination for r in self.results if r.ok and not r.entry.is_dir]

    @property
    def directories(self) -> List[str]:
        return [r.entry.destination for r in self.results if r.ok and r.entry.is_dir]

    @property
    def ok(self) -> bool:
        return not self.failed


# ── mirror ───────────────────────────────────────────────────────────────────

class TreeMirror:
    """Applies a VigenereCipher file transform across a directory tree."""

    def __init__(self, cipher: VigenereCipher, max_depth: int = None,
                 follow_links: bool = False, workers: int = 1):
        if cipher is None:
            raise InvalidArgumentError("TreeMirror needs a cipher.")
        if max_depth is not None and max_depth < 0:
            raise InvalidArgumentError(f"max_depth must be >= 0, got {max_depth}.")
        if workers < 1:
            raise InvalidArgumentError(f"workers must be >= 1, got {workers}.")
        self._cipher       = cipher
        self._max_depth    = max_depth
        self._follow_links = follow_links
        self._workers      = workers

    def mirror_encrypt(self, source) -> MirrorReport:
        """Encrypt source into '<source>.encrypted'."""
        return self._mirror(source, encrypted_destination(source),
                            self._cipher.encrypt_file, "encrypt")

    def mirror_decrypt(self, source) -> MirrorReport:
        """Decrypt source into its '.decrypted' sibling."""
        return self._mirror(source, decrypted_destination(source),
                            self._cipher.decrypt_file, "decrypt")

    def plan(self, source, destination) -> Tuple[List[TreeEntry], List[EntryResult]]:
        """
        List the tree under source and map every path under destination.
        Returns (entries, listing_failures). Raises EnumerationError if the
        root itself cannot be listed.
        """
        root = _absolute(source)
        destination = _absolute(destination)
        entries, failures = [], []

        def target(path):
            rel = path[len(root):].lstrip(os.sep)
            return os.path.join(destination, rel) if rel else destination

        def unlisted(path, exc):
            logger.error(f"Cannot list {path}: {exc}")
            failures.append(EntryResult(TreeEntry(path, target(path), True), exc))

        for path, is_dir in iter_tree(root, self._max_depth, self._follow_links, unlisted):
            entries.append(TreeEntry(path, target(path), is_dir))
        return entries, failures

    def _mirror(self, source, destination, transform, verb) -> MirrorReport:
        root = _absolute(source)
        logger.info(f"{verb} tree: {root} -> {destination} | key={self._cipher.key_fingerprint}")
        entries, failures = self.plan(root, destination)

        report = MirrorReport(root, destination)
        dirs  = [e for e in entries if e.is_dir]
        files = [e for e in entries if not e.is_dir]

        # directories first so concurrent file writes find their parents
        for entry in dirs:
            report.results.append(self._attempt(self._make_dir, entry))

        write = functools.partial(self._write_file, transform)
        if self._workers == 1 or len(files) < 2:
            report.results.extend(self._attempt(write, e) for e in files)
        else:
            with ThreadPoolExecutor(max_workers=self._workers) as pool:
                report.results.extend(pool.map(lambda e: self._attempt(write, e), files))
        report.results.extend(failures)

        logger.info(
            f"{verb} tree done: {len(report.files)} files, {len(report.directories)} dirs, "
            f"{len(report.failed)} failed"
        )
        return report

    @staticmethod
    def _make_dir(entry: TreeEntry) -> None:
        os.makedirs(entry.destination, exist_ok=True)

    @staticmethod
    def _write_file(transform, entry: TreeEntry) -> None:
        os.makedirs(os.path.dirname(entry.destination), exist_ok=True)
        transform(entry.source, entry.destination)

    @staticmethod
    def _attempt(action, entry: TreeEntry) -> EntryResult:
        try:
            action(entry)
        except (OSError, UnicodeError) as exc:
            logger.error(f"{entry.source} -> {entry.destination} failed: {exc}")
            return EntryResult(entry, exc)
        logger.debug(f"ok: {entry.destination}")
        return EntryResult(entry)


def mirror_encrypt(cipher: VigenereCipher, source, max_depth: int = None) -> MirrorReport:
    return TreeMirror(cipher, max_depth=max_depth).mirror_encrypt(source)


def mirror_decrypt(cipher: VigenereCipher, source, max_depth: int = None) -> MirrorReport:
    return TreeMirror(cipher, max_depth=max_depth).mirror_decrypt(source)
