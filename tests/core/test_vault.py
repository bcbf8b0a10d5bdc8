"""Credential Vault — reversible encoding of secrets."""

import pytest

from account_market.core.vault import VaultDecodeError, decode_secret, encode_secret


def test_round_trip_keeps_unicode():
    secret = "login: joão@example.com\npassword: ✓p@ss"
    assert decode_secret(encode_secret(secret)) == secret


def test_encoded_form_hides_plain_text():
    assert "hunter2" not in encode_secret("hunter2")


def test_corrupt_blob_raises():
    with pytest.raises(VaultDecodeError):
        decode_secret("not*base64")


def test_uses_standard_alphabet():
    assert encode_secret("?>?") == "Pz4/"
    assert decode_secret("Pz4/") == "?>?"
