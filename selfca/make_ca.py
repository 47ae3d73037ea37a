"""Create a self-signed root CA (EC key + X.509 certificate).

Generates a P-521 key and a self-signed CA certificate valid for one
month, then writes `<O>-crt.pem` and `<O>-pkey.pem` where `<O>` is the
certificate's organization. Every setting can also come from `CA_*`
environment variables or a `.env` file.

Example:
	python -m selfca.make_ca --organization SpaceY --outdir certs
"""

import argparse
import sys
from typing import List, Optional

from cryptography.hazmat.primitives import hashes

from .common.config import load_config
from .common.errors import CAError
from .crypto.builder import build_self_signed_ca
from .storage.writer import dump_to_files


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="Generate a self-signed root CA")
	parser.add_argument("--organization", help="Organization (O), also the output file prefix")
	parser.add_argument("--country", help="Two-letter country code (C)")
	parser.add_argument("--serial", type=int, help="Certificate serial number (default: random)")
	parser.add_argument("--months", dest="validity_months", type=int, help="Validity period in calendar months")
	parser.add_argument("--curve", choices=["P-256", "P-384", "P-521"], help="Elliptic curve for the CA key")
	parser.add_argument(
		"--no-any-eku",
		dest="ext_key_usage_any",
		action="store_const",
		const=False,
		help="Leave out the anyExtendedKeyUsage extension",
	)
	parser.add_argument("--outdir", default=".", help="Output directory for the PEM files")
	return parser


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)

	try:
		config = load_config(
			organization=args.organization,
			country=args.country,
			serial=args.serial,
			validity_months=args.validity_months,
			curve=args.curve,
			ext_key_usage_any=args.ext_key_usage_any,
		)
		pki = build_self_signed_ca(config)
		crt_path, key_path = dump_to_files(pki.ca.organization, pki, args.outdir)
	except CAError as e:
		print(f"error: {e}", file=sys.stderr)
		sys.exit(1)

	fingerprint = pki.certificate().fingerprint(hashes.SHA256()).hex()
	print(f"Wrote CA cert: {crt_path}")
	print(f"Wrote CA key: {key_path}")
	print(f"SHA-256 fingerprint: {fingerprint}")
	return 0


if __name__ == "__main__":
	sys.exit(main())
