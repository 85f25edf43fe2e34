from __future__ import annotations

import base64
import os
import re
from typing import Any
from urllib.parse import SplitResult, urlsplit, urlunsplit

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

STREAM_PASSWORD_RE = re.compile(r"((?:rtsps?|https?)://[^:@/\s]+:)([^@/\s]+)(@)", re.IGNORECASE)
PASSWORD_PAIR_RE = re.compile(r"(password\s*[=:]\s*)([^\s,;]+)", re.IGNORECASE)
TOKEN_RE = re.compile(r"(token\s*[=:]\s*)([^\s,;]+)", re.IGNORECASE)
ENTITY_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,63}$")

HASH_SCHEME = "scrypt"
SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_LENGTH = 32
SALT_BYTES = 16


def sanitize_stream_url(url: str) -> str:
    try:
        parts: SplitResult = urlsplit(url)
        if parts.scheme.lower() not in {"rtsp", "rtsps", "http", "https"}:
            return url
        if not parts.password:
            return url
        hostname = parts.hostname or ""
        user = parts.username or "user"
        port = f":{parts.port}" if parts.port else ""
        netloc = f"{user}:***@{hostname}{port}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
    except ValueError:
        return STREAM_PASSWORD_RE.sub(r"\1***\3", url)


def validate_entity_id(entity_id: str) -> str:
    value = str(entity_id)
    if not ENTITY_ID_RE.fullmatch(value):
        raise ValueError("Invalid id")
    return value


def redact_secrets(text: str) -> str:
    text = STREAM_PASSWORD_RE.sub(r"\1***\3", text)
    text = PASSWORD_PAIR_RE.sub(r"\1***", text)
    text = TOKEN_RE.sub(r"\1***", text)
    return text


def scrub_sensitive(obj: Any) -> Any:
    if isinstance(obj, dict):
        out: dict[str, Any] = {}
        for key, value in obj.items():
            lowered = key.lower()
            if "password" in lowered or "token" in lowered or "secret" in lowered:
                out[key] = "***"
            elif lowered == "streamurl" and isinstance(value, str):
                out[key] = sanitize_stream_url(value)
            else:
                out[key] = scrub_sensitive(value)
        return out
    if isinstance(obj, list):
        return [scrub_sensitive(v) for v in obj]
    if isinstance(obj, str):
        return redact_secrets(obj)
    return obj


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def hash_password(password: str) -> str:
    salt = os.urandom(SALT_BYTES)
    kdf = Scrypt(salt=salt, length=SCRYPT_LENGTH, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
    digest = kdf.derive(password.encode("utf-8"))
    return f"{HASH_SCHEME}${SCRYPT_N}${SCRYPT_R}${SCRYPT_P}${_b64(salt)}${_b64(digest)}"


def is_password_hash(value: str | None) -> bool:
    return bool(value) and str(value).startswith(f"{HASH_SCHEME}$")


def verify_password(password: str, stored: str | None) -> bool:
    """Check ``password`` against a stored scrypt hash.

    Stored values that are not hashes are compared as legacy cleartext so
    profiles written by the browser-only app can still sign in once.
    """
    if stored is None:
        return False
    if not is_password_hash(stored):
        return password == stored
    try:
        _, n, r, p, salt, digest = stored.split("$")
        kdf = Scrypt(salt=_unb64(salt), length=len(_unb64(digest)), n=int(n), r=int(r), p=int(p))
        kdf.verify(password.encode("utf-8"), _unb64(digest))
    except (InvalidKey, ValueError):
        return False
    return True
