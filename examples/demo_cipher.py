"""
vigenere_crypto | Live Demo
===========================
Run:  python examples/demo_cipher.py

Encrypts a message, a file and a small directory tree in a scratch
folder, decrypts them again and checks every round trip.
"""

import sys, os, time, tempfile
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vigenere_crypto.engine import VigenereCipher
from vigenere_crypto.mirror import TreeMirror

LINE = "═" * 70
KEY  = "LeBlanc1586"
MSG  = "Harvest Now, Decrypt Later.\r\nField notes: tab\there, é passes through."

def header(step, name):
    print(f"\n{LINE}")
    print(f"  {step}. {name}")
    print(LINE)

def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")

# ─────────────────────────────────────────────────────────────────────────────
print(f"\n{LINE}")
print("  vigenere_crypto | Text, File and Tree Demo")
print(LINE)
cipher = VigenereCipher(KEY)
ok("Cipher", repr(cipher))

# ── TEXT ─────────────────────────────────────────────────────────────────────
header(1, "TEXT")
ct = cipher.encrypt(MSG)
pt = cipher.decrypt(ct)
ok("Encrypted", repr(ct[:40]) + "...")
ok("Decrypted", repr(pt[:40]) + "...")
assert pt == MSG

# ── FILE ─────────────────────────────────────────────────────────────────────
scratch = tempfile.mkdtemp(prefix="vigenere-demo-")
header(2, "FILE")
plain = os.path.join(scratch, "message.txt")
with open(plain, "w", encoding="utf-8", newline="") as f:
    f.write(MSG * 2000)
t0 = time.perf_counter()
n  = cipher.encrypt_file(plain, plain + ".enc")
cipher.decrypt_file(plain + ".enc", plain + ".dec")
elapsed = time.perf_counter() - t0
with open(plain, "rb") as a, open(plain + ".dec", "rb") as b:
    assert a.read() == b.read()
ok("Characters", f"{n:,}")
ok("Round-trip", f"{elapsed*1000:.2f} ms")

# ── TREE ─────────────────────────────────────────────────────────────────────
header(3, "TREE")
root = os.path.join(scratch, "docs")
os.makedirs(os.path.join(root, "sub", "deeper"))
for rel in ("a.txt", os.path.join("sub", "b.txt"), os.path.join("sub", "deeper", "c.txt")):
    with open(os.path.join(root, rel), "w", encoding="utf-8") as f:
        f.write(f"{rel}: {MSG}")

mirror = TreeMirror(cipher, workers=2)
enc = mirror.mirror_encrypt(root)
ok("Encrypted", f"{len(enc.files)} files, {len(enc.directories)} dirs -> {enc.destination}")
dec = mirror.mirror_decrypt(enc.destination)
ok("Decrypted", f"{len(dec.files)} files, {len(dec.directories)} dirs -> {dec.destination}")
assert enc.ok and dec.ok

print(f"\n{LINE}")
print(f"  All round trips passed. Scratch folder: {scratch}")
print(f"{LINE}\n")
