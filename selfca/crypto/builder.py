"""Self-signed root CA construction.

The builder runs in three steps:
1. `new_template()` fills an unsigned certificate template from a `CAConfig`
2. `generate_key()` creates a fresh EC key pair from the OS CSPRNG
3. `self_sign()` signs the template with its own key, issuer == subject

`build_self_signed_ca()` chains them and returns a `PKI` bundle. Any
failure raises; a bundle is only ever returned complete.
"""

from datetime import datetime
from typing import Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID
from pydantic import BaseModel
from pydantic.config import ConfigDict

from ..common.config import CAConfig
from ..common.errors import ConfigError, KeyGenerationError, SigningError
from ..common.utils import add_months, now_utc
from .sign import curve_by_name, hash_for_curve


class CertificateTemplate(BaseModel):
    """Unsigned description of a CA certificate."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    serial_number: int
    organization: str
    country: str
    province: str = ""
    locality: str = ""
    street_address: str = ""
    postal_code: str = ""
    not_before: datetime
    not_after: datetime
    is_ca: bool = True
    # key usage bits
    digital_signature: bool = True
    key_cert_sign: bool = True
    ext_key_usage_any: bool = True
    # path length stays unset
    basic_constraints_valid: bool = True

    def subject(self) -> x509.Name:
        """Distinguished name of the template, blank fields left out."""
        fields = [
            (NameOID.COUNTRY_NAME, self.country),
            (NameOID.STATE_OR_PROVINCE_NAME, self.province),
            (NameOID.LOCALITY_NAME, self.locality),
            (NameOID.STREET_ADDRESS, self.street_address),
            (NameOID.POSTAL_CODE, self.postal_code),
            (NameOID.ORGANIZATION_NAME, self.organization),
        ]
        return x509.Name([x509.NameAttribute(oid, value) for oid, value in fields if value])


class PKI(BaseModel):
    """A freshly built CA: template, key pair and DER certificate."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ca: CertificateTemplate
    priv: ec.EllipticCurvePrivateKey
    pub: ec.EllipticCurvePublicKey
    # DER encoded certificate
    cert: bytes

    def certificate(self) -> x509.Certificate:
        return x509.load_der_x509_certificate(self.cert)


def new_template(config: CAConfig, now: Optional[datetime] = None) -> CertificateTemplate:
    """Populate a CA template from `config`.

    The validity window starts at `now` (default: current UTC time) and
    ends `config.validity_months` calendar months later.

    Raises:
        ConfigError: if the window ends after year 9999
    """
    if now is None:
        now = now_utc()

    try:
        not_after = add_months(now, config.validity_months)
    except (ValueError, OverflowError) as e:
        raise ConfigError(f"validity of {config.validity_months} months ends out of range: {e}") from e

    # (issuer DN + serial) must be unique per CA
    serial = config.serial if config.serial is not None else x509.random_serial_number()

    return CertificateTemplate(
        serial_number=serial,
        organization=config.organization,
        country=config.country,
        province=config.province,
        locality=config.locality,
        street_address=config.street_address,
        postal_code=config.postal_code,
        not_before=now,
        not_after=not_after,
        ext_key_usage_any=config.ext_key_usage_any,
    )


def generate_key(curve: str = "P-521") -> ec.EllipticCurvePrivateKey:
    """Generate an EC private key on the named curve.

    Raises:
        KeyGenerationError: if the curve is unknown or generation fails
    """
    try:
        return ec.generate_private_key(curve_by_name(curve))
    except (ValueError, TypeError, UnsupportedAlgorithm, OSError) as e:
        raise KeyGenerationError(f"could not generate {curve} key: {e}") from e


def sign_certificate(
    template: CertificateTemplate,
    issuer: CertificateTemplate,
    issuer_key: ec.EllipticCurvePrivateKey,
    public_key: ec.EllipticCurvePublicKey,
) -> bytes:
    """Sign `template` as `issuer` and return the DER certificate.

    Raises:
        SigningError: if the certificate cannot be built or signed
    """
    try:
        builder = (
            x509.CertificateBuilder()
            .subject_name(template.subject())
            .issuer_name(issuer.subject())
            .public_key(public_key)
            .serial_number(template.serial_number)
            .not_valid_before(template.not_before)
            .not_valid_after(template.not_after)
        )
        if template.basic_constraints_valid:
            builder = builder.add_extension(
                x509.BasicConstraints(ca=template.is_ca, path_length=None), critical=True
            )
        builder = builder.add_extension(
            x509.KeyUsage(
                digital_signature=template.digital_signature,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=template.key_cert_sign,
                crl_sign=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        if template.ext_key_usage_any:
            builder = builder.add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.ANY_EXTENDED_KEY_USAGE]), critical=False
            )
        builder = builder.add_extension(
            x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False
        )
        cert = builder.sign(issuer_key, hash_for_curve(issuer_key.curve))
    except (ValueError, TypeError, AttributeError, UnsupportedAlgorithm) as e:
        raise SigningError(f"could not sign certificate: {e}") from e

    return cert.public_bytes(serialization.Encoding.DER)


def self_sign(template: CertificateTemplate, key: ec.EllipticCurvePrivateKey) -> bytes:
    """Sign `template` with its own key; the template is issuer and subject."""
    return sign_certificate(template, template, key, key.public_key())


def build_self_signed_ca(config: Optional[CAConfig] = None, now: Optional[datetime] = None) -> PKI:
    """Build a complete self-signed root CA.

    Raises:
        ConfigError: the validity window does not fit the calendar
        KeyGenerationError: key pair generation failed
        SigningError: self-signing failed
    """
    if config is None:
        config = CAConfig()

    template = new_template(config, now)
    priv = generate_key(config.curve)
    cert = self_sign(template, priv)
    return PKI(ca=template, priv=priv, pub=priv.public_key(), cert=cert)
