"""
vigenere_crypto | Tree Mirror tests
===================================
Run with:  python -m pytest tests/ -v
       or:  python tests/test_mirror.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from vigenere_crypto.engine import VigenereCipher
from vigenere_crypto.errors import EnumerationError, InvalidArgumentError
from vigenere_crypto.mirror import (TreeMirror, iter_tree, encrypted_destination,
                                    decrypted_destination, mirror_encrypt,
                                    mirror_decrypt)

KEY = "s3cret-Key"

FILES = {
    "readme.txt":                "Top level file.\r\nSecond line\n",
    "notes.encrypted.txt":       "name kept verbatim",
    "sub/a.txt":                 "alpha {beta} [gamma]",
    "sub/deeper/b.txt":          "deep\tfile\x00with control",
    "sub/deeper/deepest/c.md":   "# title\n\nbody `code` é\n",
}
EMPTY_DIRS = ["empty", "sub/also-empty"]


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "docs"
    for rel, text in FILES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode())
    for rel in EMPTY_DIRS:
        (root / rel).mkdir(parents=True)
    return root


@pytest.fixture
def cipher():
    return VigenereCipher(KEY)


def snapshot(root):
    """Map of relative path -> bytes (None for directories)."""
    out = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for d in dirnames:
            out[os.path.relpath(os.path.join(dirpath, d), root)] = None
        for f in filenames:
            full = os.path.join(dirpath, f)
            with open(full, "rb") as fh:
                out[os.path.relpath(full, root)] = fh.read()
    return out

# ── destination naming ───────────────────────────────────────────────────────
def test_encrypted_destination(tmp_path):
    assert encrypted_destination(tmp_path / "docs") == str(tmp_path / "docs.encrypted")

@pytest.mark.parametrize("leaf, expected", [
    ("docs.encrypted",           "docs.decrypted"),
    ("docs",                     "docs.decrypted"),
    ("a.encrypted.b.encrypted",  "a.b.encrypted.decrypted"),
    ("x.encryptedy",             "xy.decrypted"),
])
def test_decrypted_destination(tmp_path, leaf, expected):
    assert decrypted_destination(tmp_path / leaf) == str(tmp_path / expected)

def test_destination_of_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert encrypted_destination("docs") == str(tmp_path / "docs.encrypted")

# ── enumeration ──────────────────────────────────────────────────────────────
def test_iter_tree_lists_everything(tree):
    found = {os.path.relpath(p, tree): is_dir for p, is_dir in iter_tree(tree)}
    assert found.pop(".") is True
    expected = {rel: False for rel in FILES}
    expected.update({rel: True for rel in EMPTY_DIRS})
    expected.update({"sub": True, "sub/deeper": True, "sub/deeper/deepest": True})
    assert found == {os.path.normpath(k): v for k, v in expected.items()}

def test_iter_tree_root_first(tree):
    first, is_dir = next(iter(iter_tree(tree)))
    assert first == str(tree) and is_dir

def test_iter_tree_depth_zero(tree):
    assert list(iter_tree(tree, max_depth=0)) == [(str(tree), True)]

def test_iter_tree_depth_one(tree):
    found = {os.path.relpath(p, tree) for p, _ in iter_tree(tree, max_depth=1)}
    assert found == {".", "readme.txt", "notes.encrypted.txt", "sub", "empty"}

def test_iter_tree_missing_root(tmp_path):
    with pytest.raises(EnumerationError):
        list(iter_tree(tmp_path / "missing"))

def test_iter_tree_file_root(tmp_path):
    f = tmp_path / "file.txt"
    f.write_text("x")
    with pytest.raises(EnumerationError):
        list(iter_tree(f))

def test_iter_tree_negative_depth(tree):
    with pytest.raises(InvalidArgumentError):
        list(iter_tree(tree, max_depth=-1))

# ── mirror ───────────────────────────────────────────────────────────────────
def test_mirror_encrypt_is_complete(tree, cipher):
    report = TreeMirror(cipher).mirror_encrypt(tree)
    dest = tree.parent / "docs.encrypted"
    assert report.ok
    assert report.destination == str(dest)

    before, after = snapshot(tree), snapshot(dest)
    assert set(after) == set(before)
    for rel, data in before.items():
        if data is None:
            assert after[rel] is None
        else:
            assert after[rel] == cipher.encrypt(data.decode()).encode()
    assert len(report.files) == len(FILES)

def test_mirror_roundtrip(tree, cipher):
    TreeMirror(cipher).mirror_encrypt(tree)
    report = TreeMirror(cipher).mirror_decrypt(tree.parent / "docs.encrypted")
    assert report.ok
    assert report.destination == str(tree.parent / "docs.decrypted")
    assert snapshot(tree.parent / "docs.decrypted") == snapshot(tree)

def test_mirror_leaves_source_untouched(tree, cipher):
    before = snapshot(tree)
    mirror_encrypt(cipher, tree)
    assert snapshot(tree) == before

def test_mirror_is_idempotent_over_existing_destination(tree, cipher):
    mirror_encrypt(cipher, tree)
    first = snapshot(tree.parent / "docs.encrypted")
    report = mirror_encrypt(cipher, tree)
    assert report.ok
    assert snapshot(tree.parent / "docs.encrypted") == first

def test_mirror_depth_limit(tree, cipher):
    report = mirror_encrypt(cipher, tree, max_depth=1)
    dest = tree.parent / "docs.encrypted"
    assert report.ok
    assert set(snapshot(dest)) == {"readme.txt", "notes.encrypted.txt", "sub", "empty"}

def test_mirror_depth_zero_creates_root_only(tree, cipher):
    mirror_encrypt(cipher, tree, max_depth=0)
    dest = tree.parent / "docs.encrypted"
    assert dest.is_dir()
    assert snapshot(dest) == {}

def test_mirror_workers_match_serial(tree, cipher, tmp_path):
    serial = TreeMirror(cipher).mirror_encrypt(tree)
    expected = snapshot(serial.destination)
    os.rename(serial.destination, tmp_path / "serial")

    parallel = TreeMirror(cipher, workers=4).mirror_encrypt(tree)
    assert parallel.ok
    assert snapshot(parallel.destination) == expected

def test_mirror_missing_root_fails_before_writing(tmp_path, cipher):
    with pytest.raises(EnumerationError):
        TreeMirror(cipher).mirror_encrypt(tmp_path / "missing")
    assert not (tmp_path / "missing.encrypted").exists()

def test_mirror_file_root_fails(tmp_path, cipher):
    f = tmp_path / "single.txt"
    f.write_text("not a dir")
    with pytest.raises(EnumerationError):
        mirror_decrypt(cipher, f)

def test_mirror_continues_after_file_failure(tree, cipher):
    # a directory where readme.txt should be written makes that one file fail
    blocker = tree.parent / "docs.encrypted" / "readme.txt"
    blocker.mkdir(parents=True)

    report = TreeMirror(cipher).mirror_encrypt(tree)
    assert not report.ok
    assert len(report.failed) == 1
    failure = report.failed[0]
    assert failure.entry.source == str(tree / "readme.txt")
    assert isinstance(failure.error, OSError)

    dest = tree.parent / "docs.encrypted"
    for rel, text in FILES.items():
        if rel == "readme.txt":
            continue
        assert (dest / rel).read_bytes() == cipher.encrypt(text).encode()

def test_mirror_failure_is_logged(tree, cipher, caplog):
    (tree.parent / "docs.encrypted" / "readme.txt").mkdir(parents=True)
    with caplog.at_level("ERROR", logger="vigenere_crypto.mirror"):
        TreeMirror(cipher).mirror_encrypt(tree)
    assert any("readme.txt" in r.getMessage() for r in caplog.records)

@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_mirror_does_not_follow_dir_links(tree, cipher, tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("outside the tree")
    os.symlink(outside, tree / "link", target_is_directory=True)

    report = TreeMirror(cipher).mirror_encrypt(tree)
    dest = tree.parent / "docs.encrypted"
    assert report.ok
    assert (dest / "link").is_dir()
    assert not (dest / "link" / "secret.txt").exists()

    report = TreeMirror(cipher, follow_links=True).mirror_encrypt(tree)
    assert (dest / "link" / "secret.txt").exists()

@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_mirror_records_unreadable_source(tree, cipher):
    os.symlink(tree / "missing-target.txt", tree / "x.txt")

    report = TreeMirror(cipher).mirror_encrypt(tree)
    assert len(report.failed) == 1
    failure = report.failed[0]
    assert failure.entry.source == str(tree / "x.txt")
    assert not failure.entry.is_dir
    assert isinstance(failure.error, OSError)

    dest = tree.parent / "docs.encrypted"
    assert not (dest / "x.txt").exists()
    for rel, text in FILES.items():
        assert (dest / rel).read_bytes() == cipher.encrypt(text).encode()
    assert len(report.files) == len(FILES)

# ── deep trees ───────────────────────────────────────────────────────────────
DEEP_TEXT = "bottom of the chain\n"

def remove_chain(top):
    """Remove a chain of 'a' directories bottom-up, leaving top itself."""
    dirs = [str(top)]
    while os.path.isdir(os.path.join(dirs[-1], "a")):
        dirs.append(os.path.join(dirs[-1], "a"))
    for path in reversed(dirs[1:]):
        for name in os.listdir(path):
            os.remove(os.path.join(path, name))
        os.rmdir(path)


@pytest.fixture
def deep_tree(tmp_path):
    # deeper than the interpreter's recursion limit; built one level at a
    # time because os.makedirs recurses per missing component
    depth = sys.getrecursionlimit() + 100
    if depth * 2 > 3500:
        pytest.skip("path would exceed PATH_MAX")
    root = tmp_path / "deep"
    path = str(root)
    os.mkdir(path)
    for _ in range(depth):
        path = os.path.join(path, "a")
        os.mkdir(path)
    with open(os.path.join(path, "f.txt"), "wb") as fh:
        fh.write(DEEP_TEXT.encode())

    yield root, depth

    for top in (root, tmp_path / "deep.encrypted"):
        if top.exists():
            remove_chain(top)

def test_iter_tree_deeper_than_recursion_limit(deep_tree):
    root, depth = deep_tree
    entries = list(iter_tree(root))
    # root, every level of the chain, then the file at the bottom
    assert len(entries) == depth + 2
    assert entries[-1] == (os.path.join(str(root), *["a"] * depth, "f.txt"), False)

def test_mirror_deeper_than_recursion_limit(deep_tree, cipher):
    root, depth = deep_tree
    report = TreeMirror(cipher).mirror_encrypt(root)
    assert report.ok
    assert len(report.files) == 1
    assert len(report.directories) == depth + 1

    bottom = os.path.join(report.destination, *["a"] * depth, "f.txt")
    with open(bottom, "rb") as fh:
        assert fh.read() == cipher.encrypt(DEEP_TEXT).encode()

# ── options ──────────────────────────────────────────────────────────────────
@pytest.mark.parametrize("kwargs", [{"workers": 0}, {"max_depth": -1}])
def test_mirror_bad_options(cipher, kwargs):
    with pytest.raises(InvalidArgumentError):
        TreeMirror(cipher, **kwargs)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
