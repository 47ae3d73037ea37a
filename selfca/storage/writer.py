"""Write a built CA to PEM files.

Produces, for a prefix such as the certificate's organization:
  <prefix>-crt.pem   CERTIFICATE block (DER certificate)
  <prefix>-pkey.pem  PRIVATE KEY block (unencrypted PKCS#8)
"""

import base64
import os
import re
from pathlib import Path
from typing import List, Tuple, Union

from cryptography.hazmat.primitives import serialization

from ..common.errors import EncodingError, PersistenceError
from ..crypto.builder import PKI

CERT_SUFFIX = "-crt.pem"
KEY_SUFFIX = "-pkey.pem"

_PEM_RE = re.compile(
    rb"-----BEGIN ([A-Z0-9 ]+)-----\r?\n(.*?)-----END \1-----",
    re.DOTALL,
)


def _private_opener(path, flags):
    return os.open(path, flags, 0o600)


def output_paths(prefix: str, outdir: Union[str, Path] = ".") -> Tuple[Path, Path]:
    """Return the (certificate, private key) paths for `prefix`."""
    outdir = Path(outdir)
    return outdir / f"{prefix}{CERT_SUFFIX}", outdir / f"{prefix}{KEY_SUFFIX}"


def encode_private_key(pki: PKI) -> bytes:
    """PEM-encode the private key as unencrypted PKCS#8."""
    try:
        return pki.priv.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except (ValueError, TypeError) as e:
        raise EncodingError(f"could not encode private key as PKCS#8: {e}") from e


def encode_certificate(pki: PKI) -> bytes:
    """PEM-encode the DER certificate."""
    try:
        return pki.certificate().public_bytes(serialization.Encoding.PEM)
    except ValueError as e:
        raise EncodingError(f"could not encode certificate: {e}") from e


def pem_blocks(data: bytes) -> List[Tuple[str, bytes]]:
    """Decode every PEM block in `data` into (label, DER bytes)."""
    return [
        (label.decode("ascii"), base64.b64decode(b"".join(body.split())))
        for label, body in _PEM_RE.findall(data)
    ]


def _write(path: Path, data: bytes, opener=None) -> None:
    try:
        with open(path, "wb", opener=opener) as f:
            f.write(data)
    except OSError as e:
        raise PersistenceError(f"could not write {path}: {e}", path=path) from e


def dump_to_files(prefix: str, pki: PKI, outdir: Union[str, Path] = ".") -> Tuple[Path, Path]:
    """Write the certificate and private key of `pki`.

    The key is encoded before any file is touched. Files are written in
    order (certificate, then key) and the first failure is raised; a
    certificate already written is left in place.

    Raises:
        EncodingError: PKCS#8 marshaling failed
        PersistenceError: a file could not be created or written
    """
    key_pem = encode_private_key(pki)
    crt_pem = encode_certificate(pki)

    crt_path, key_path = output_paths(prefix, outdir)
    _write(crt_path, crt_pem)
    _write(key_path, key_pem, opener=_private_opener)
    return crt_path, key_path
