"""Device credential generation."""
import secrets

TOKEN_BYTES = 32  # 256 bits


class TokenIssuer:
    """Issues random device tokens as fixed-length lowercase hex."""

    def __init__(self, num_bytes: int = TOKEN_BYTES):
        if num_bytes < TOKEN_BYTES:
            raise ValueError(f"device tokens need at least {TOKEN_BYTES} bytes of entropy")
        self.num_bytes = num_bytes

    def issue(self) -> str:
        return secrets.token_hex(self.num_bytes)
