from __future__ import annotations

import secrets
import string
import time


def new_id(prefix: str) -> str:
    """Record id such as ``s_1718000000000_3f9a``.

    Millisecond timestamp plus a random suffix so ids minted in the same
    millisecond (bulk imports) stay distinct.
    """

    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(2)}"


def random_code(length: int, alphabet: str = string.ascii_lowercase + string.digits) -> str:
    return "".join(secrets.choice(alphabet) for _ in range(length))


def activation_code() -> str:
    return str(1000 + secrets.randbelow(9000))
