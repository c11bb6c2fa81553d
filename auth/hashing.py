from __future__ import annotations
import sys
from passlib.context import CryptContext

_pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=290000,
)

def hash_password(password: str) -> str:
    return _pwd_context.hash(password)

def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return _pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        # hash corrupto o formato desconocido
        return False

def main(argv: list[str] | None = None) -> int:
    """python -m auth.hashing <password>  ->  valor para ONLINE_ADMIN_PASSWORD_HASH"""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("uso: python -m auth.hashing <password>", file=sys.stderr)
        return 2
    print(hash_password(args[0]))
    return 0

if __name__ == "__main__":
    sys.exit(main())
