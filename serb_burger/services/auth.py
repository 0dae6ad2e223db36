"""
Admin session tokens.

The admin cookie carries an HMAC of a fixed label keyed by the admin
password. Changing ADMIN_PASSWORD therefore invalidates every issued
cookie without any server-side session store.
"""

import hashlib
import hmac
from typing import Optional

_TOKEN_LABEL = b"serb-burger-admin-session"


def password_matches(candidate: str, password: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), password.encode("utf-8"))


def issue_token(password: str) -> str:
    return hmac.new(password.encode("utf-8"), _TOKEN_LABEL, hashlib.sha256).hexdigest()


def token_valid(token: Optional[str], password: str) -> bool:
    if not token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), issue_token(password).encode("utf-8"))
