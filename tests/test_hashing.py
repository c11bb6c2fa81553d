from __future__ import annotations

from auth.hashing import hash_password, main, verify_password


def test_hash_and_verify():
    h = hash_password("Admin123!")
    assert h.startswith("$pbkdf2-sha256$")
    assert verify_password("Admin123!", h) is True
    assert verify_password("otra", h) is False


def test_verify_without_hash():
    assert verify_password("Admin123!", None) is False
    assert verify_password("Admin123!", "") is False


def test_verify_with_garbage_hash():
    assert verify_password("Admin123!", "no-es-un-hash") is False


def test_main_prints_hash(capsys):
    assert main(["secreto"]) == 0
    out = capsys.readouterr().out.strip()
    assert verify_password("secreto", out)


def test_main_usage(capsys):
    assert main([]) == 2
    assert "uso" in capsys.readouterr().err
