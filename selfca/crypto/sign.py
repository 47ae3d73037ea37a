"""ECDSA signing helpers.

This module provides functions for signing and verifying messages:
- curve_by_name(): Map "P-256" / "P-384" / "P-521" to a curve instance
- hash_for_curve(): Digest paired with a curve for signatures
- sign_message(): Sign data with an EC private key
- verify_signature(): Verify a signature with an EC public key

The digest follows the curve size (P-256/SHA-256, P-384/SHA-384,
P-521/SHA-512), which is also what the certificate signature uses.
"""

from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

CURVES = {
    "P-256": ec.SECP256R1,
    "P-384": ec.SECP384R1,
    "P-521": ec.SECP521R1,
}

_HASHES = {
    "secp256r1": hashes.SHA256,
    "secp384r1": hashes.SHA384,
    "secp521r1": hashes.SHA512,
}


def curve_by_name(name: str) -> ec.EllipticCurve:
    """Return a curve instance for a NIST curve name."""
    try:
        return CURVES[name]()
    except KeyError:
        raise ValueError(f"unsupported curve: {name}") from None


def hash_for_curve(curve: ec.EllipticCurve) -> hashes.HashAlgorithm:
    """Return the signature digest that matches `curve`."""
    try:
        return _HASHES[curve.name]()
    except KeyError:
        raise ValueError(f"no digest defined for curve {curve.name}") from None


def sign_message(key: ec.EllipticCurvePrivateKey, message: Union[str, bytes]) -> bytes:
    """Sign a message with ECDSA.

    Args:
        key: EC private key for signing
        message: The message to sign (str or bytes)

    Returns:
        DER-encoded ECDSA signature bytes
    """
    if isinstance(message, str):
        message = message.encode("utf-8")

    return key.sign(message, ec.ECDSA(hash_for_curve(key.curve)))


def verify_signature(
    key: ec.EllipticCurvePublicKey,
    message: Union[str, bytes],
    signature: bytes,
) -> bool:
    """Verify an ECDSA signature. Returns True if valid, False otherwise."""
    if isinstance(message, str):
        message = message.encode("utf-8")

    try:
        key.verify(signature, message, ec.ECDSA(hash_for_curve(key.curve)))
        return True
    except InvalidSignature:
        return False
