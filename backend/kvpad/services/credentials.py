"""
KVPad Backend — Credential Transport Encoding
==============================================

What:  Encodes a secret for the `q` query parameter and decodes it back.
How:   Standard base64 of the UTF-8 bytes with trailing "=" padding removed;
       decoding re-pads to a multiple of 4 before a strict base64 decode.

Security Note:
    This is obfuscation, not encryption. Anyone who sees the URL can recover
    the secret. It only keeps the password out of casual view.
"""

import base64
import binascii

from kvpad.exceptions import CredentialDecodeError


def encode_credential(secret: str) -> str:
    """Padding-stripped standard base64 of `secret`."""
    return base64.b64encode(secret.encode("utf-8")).decode("ascii").rstrip("=")


def decode_credential(token: str) -> str:
    """
    Recover the secret from a transport token.

    Raises:
        CredentialDecodeError: token is not valid base64 or not UTF-8 text.
    """
    # "+" arrives as a space when a client does not percent-encode the query
    token = token.replace(" ", "+").strip()
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded, validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise CredentialDecodeError(context={"reason": type(e).__name__})
