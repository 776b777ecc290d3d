"""Device token issuance tests."""
import re

import pytest

from app.domain.devices.tokens import TokenIssuer


def test_token_is_64_hex_chars():
    token = TokenIssuer().issue()
    assert re.fullmatch(r"[0-9a-f]{64}", token)


def test_tokens_do_not_repeat():
    issuer = TokenIssuer()
    tokens = {issuer.issue() for _ in range(200)}
    assert len(tokens) == 200


def test_longer_tokens_allowed():
    assert len(TokenIssuer(num_bytes=48).issue()) == 96


def test_less_than_256_bits_rejected():
    with pytest.raises(ValueError):
        TokenIssuer(num_bytes=16)
