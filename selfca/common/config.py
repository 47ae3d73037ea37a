"""CA configuration model.

The values that used to be fixed constants (serial, organization,
validity length, curve, extended key usage policy) are fields of
`CAConfig`. `load_config()` layers them as follows:

1. field defaults (they reproduce the classic SpaceY CA)
2. a `.env` file, loaded with python-dotenv
3. `CA_*` environment variables
4. explicit keyword overrides (the command line)
"""

import os
from typing import Any, Dict, Literal, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from .errors import ConfigError

# rfc 5280 caps serials at 20 octets, cryptography at 159 bits
MAX_SERIAL = (1 << 159) - 1

ENV_PREFIX = "CA_"

ENV_FIELDS = (
	"serial",
	"organization",
	"country",
	"province",
	"locality",
	"street_address",
	"postal_code",
	"validity_months",
	"curve",
	"ext_key_usage_any",
)


class CAConfig(BaseModel):
	"""Settings for one self-signed root CA."""
	model_config = ConfigDict(
		frozen=True,
		extra='forbid',
		str_strip_whitespace=True,
	)

	# None means draw a random serial at build time
	serial: Optional[int] = Field(default=None, ge=1, le=MAX_SERIAL)
	organization: str = Field(default="SpaceY", min_length=1)
	country: str = "US"
	province: str = ""
	locality: str = ""
	street_address: str = ""
	postal_code: str = ""
	validity_months: int = Field(default=1, ge=1)
	curve: Literal["P-256", "P-384", "P-521"] = "P-521"
	# anyExtendedKeyUsage is only there for Windows CryptoAPI
	ext_key_usage_any: bool = True

	@field_validator("country")
	@classmethod
	def _two_letter_country(cls, v: str) -> str:
		if len(v) != 2 or not v.isalpha():
			raise ValueError("country must be a two-letter code")
		return v.upper()

	@field_validator("organization")
	@classmethod
	def _usable_as_prefix(cls, v: str) -> str:
		if "/" in v or "\\" in v:
			raise ValueError("organization is used as a file prefix and may not contain path separators")
		if any(not c.isprintable() for c in v):
			raise ValueError("organization may not contain control characters")
		return v


def env_overrides(environ=None) -> Dict[str, str]:
	"""Collect non-empty `CA_*` variables keyed by field name."""
	environ = os.environ if environ is None else environ
	found = {}
	for name in ENV_FIELDS:
		value = environ.get(ENV_PREFIX + name.upper())
		if value is not None and value.strip() != "":
			found[name] = value
	return found


def load_config(dotenv=True, environ=None, **overrides: Any) -> CAConfig:
	"""Build a validated `CAConfig`.

	`dotenv` is True (search from the working directory), a path to a
	.env file, or False. Overrides whose value is None are ignored so
	argparse defaults do not shadow the environment.

	Raises:
		ConfigError: if any value fails validation
	"""
	if dotenv is True:
		load_dotenv(find_dotenv(usecwd=True))
	elif dotenv:
		load_dotenv(dotenv)

	values: Dict[str, Any] = env_overrides(environ)
	values.update({k: v for k, v in overrides.items() if v is not None})

	try:
		return CAConfig(**values)
	except ValidationError as e:
		raise ConfigError(f"invalid CA configuration: {e}") from e
