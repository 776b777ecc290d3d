"""HMAC request signing.

signature = hex(HMAC-SHA256(key=device_token, msg=raw_body || timestamp || nonce))

The body is the exact bytes received; timestamp and nonce are the header
values as sent, UTF-8 encoded, with no delimiter between the three parts.
"""
import hashlib
import hmac


def signing_message(raw_body: bytes, timestamp: str, nonce: str) -> bytes:
    return raw_body + timestamp.encode("utf-8") + nonce.encode("utf-8")


def compute_signature(device_token: str, raw_body: bytes, timestamp: str, nonce: str) -> str:
    """Hex-encoded HMAC-SHA256 over body, timestamp and nonce."""
    return hmac.new(
        device_token.encode("utf-8"),
        signing_message(raw_body, timestamp, nonce),
        hashlib.sha256,
    ).hexdigest()


def signatures_match(expected: str, supplied: str) -> bool:
    """Constant-time comparison; hex case is ignored."""
    return hmac.compare_digest(
        expected.lower().encode("ascii", "replace"),
        supplied.strip().lower().encode("ascii", "replace"),
    )
