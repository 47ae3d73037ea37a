"""X.509 CA certificate inspection helpers.

This module provides functions to check a generated root CA:
- load_certificate(): Load a PEM certificate file
- load_private_key(): Load a PEM private key file
- get_organization(): Extract O from cert subject
- validate_ca_certificate(): Check the cert is a valid self-signed CA
- key_matches_certificate(): Check a private key belongs to a cert

The validation checks:
1. Issuer equals subject and the signature verifies under the cert's own key
2. BasicConstraints is present with CA=true
3. Current time falls within cert's validity window
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from .sign import sign_message, verify_signature

PROBE_MESSAGE = b"selfca key probe"


def load_certificate(path: Union[str, Path]) -> x509.Certificate:
    """Load an X.509 certificate from a PEM file."""
    with open(path, "rb") as f:
        return x509.load_pem_x509_certificate(f.read())


def load_private_key(path: Union[str, Path]) -> ec.EllipticCurvePrivateKey:
    """Load an unencrypted EC private key from a PEM file."""
    with open(path, "rb") as f:
        return serialization.load_pem_private_key(f.read(), password=None)


def get_organization(cert: x509.Certificate) -> str:
    """Extract the Organization from certificate subject."""
    attrs = cert.subject.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)
    if not attrs:
        raise ValueError("certificate has no Organization (O)")
    return attrs[0].value


def validate_ca_certificate(
    cert: x509.Certificate,
    check_time: Optional[datetime] = None,
) -> bool:
    """Validate that a certificate is a currently valid self-signed CA.

    Args:
        cert: The certificate to validate
        check_time: Time to check validity for (default: current time, naive means UTC)

    Returns:
        True if certificate is valid, False otherwise
    """
    if check_time is None:
        check_time = datetime.now(timezone.utc)
    elif check_time.tzinfo is None:
        # naive times are taken as UTC
        check_time = check_time.replace(tzinfo=timezone.utc)

    # Check validity period
    if check_time < cert.not_valid_before_utc or check_time > cert.not_valid_after_utc:
        return False

    # Verify self signature, also checks issuer == subject
    try:
        cert.verify_directly_issued_by(cert)
    except (ValueError, TypeError, InvalidSignature):
        return False

    try:
        bc = cert.extensions.get_extension_for_class(x509.BasicConstraints)
    except x509.ExtensionNotFound:
        return False
    return bc.value.ca


def key_matches_certificate(key: ec.EllipticCurvePrivateKey, cert: x509.Certificate) -> bool:
    """Sign a probe message with `key` and verify it with the cert's public key."""
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        return False
    pub = cert.public_key()
    if not isinstance(pub, ec.EllipticCurvePublicKey) or pub.curve.name != key.curve.name:
        return False
    return verify_signature(pub, PROBE_MESSAGE, sign_message(key, PROBE_MESSAGE))


if __name__ == "__main__":
    # Check a generated pair: python -m selfca.crypto.pki SpaceY-crt.pem SpaceY-pkey.pem
    if len(sys.argv) != 3:
        print("Usage: python -m selfca.crypto.pki <crt.pem> <pkey.pem>")
        sys.exit(2)

    ca = load_certificate(sys.argv[1])
    key = load_private_key(sys.argv[2])

    print(f"CA O: {get_organization(ca)}")
    print(f"Serial: {ca.serial_number}")
    print(f"Valid: {ca.not_valid_before_utc} -> {ca.not_valid_after_utc}")
    print(f"Self-signed CA valid: {validate_ca_certificate(ca)}")
    print(f"Key matches cert: {key_matches_certificate(key, ca)}")
