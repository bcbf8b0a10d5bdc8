"""Credential Vault — reversible at-rest encoding for seller secrets and payout details.

Invariants:
    - decode(encode(s)) == s for every str s (UTF-8 round trip)
    - Encoding is NOT encryption: it only keeps secrets out of plain-text columns

Design Decisions:
    - Standard base64 alphabet, so blobs written by other marketplace tools decode;
      real encryption belongs to a key-management service
"""

import base64
import binascii


class VaultDecodeError(ValueError):
    """Stored blob is not a valid vault encoding."""


def encode_secret(secret: str) -> str:
    return base64.b64encode(secret.encode("utf-8")).decode("ascii")


def decode_secret(blob: str) -> str:
    try:
        return base64.b64decode(blob.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise VaultDecodeError("Stored credential blob is corrupt") from e
