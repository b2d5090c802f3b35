"""비밀번호 해싱 유틸리티 (bcrypt).

Password hashing with bcrypt. Accounts created by imports may carry an
empty or foreign hash; those never verify.
"""

import bcrypt

# 존재하지 않는 계정 로그인 시 비교용 해시 (Compared against when the e-mail is unknown)
_UNKNOWN_USER_HASH: bytes = bcrypt.hashpw(b"gearguard-unknown-user", bcrypt.gensalt())


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """비밀번호 검증. 해시가 없거나 bcrypt 형식이 아니면 False.

    Check a password against a stored hash. Missing or malformed hashes
    verify as False.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def burn_password_check(plain_password: str) -> None:
    """알 수 없는 이메일에도 같은 비용의 해시 비교를 수행합니다.

    Spend one bcrypt comparison for a login attempt on an unknown e-mail.
    """
    bcrypt.checkpw(plain_password.encode("utf-8"), _UNKNOWN_USER_HASH)
