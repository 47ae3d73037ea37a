"""Exception hierarchy for CA generation.

Every failure is fatal for a run. Library code raises these and the
entry point turns them into a message and a non-zero exit status.
"""


class CAError(Exception):
	"""Base class for all CA generation errors."""


class ConfigError(CAError):
	"""Configuration values are missing or invalid."""


class KeyGenerationError(CAError):
	"""The key pair could not be generated (entropy or curve failure)."""


class SigningError(CAError):
	"""The certificate could not be built or signed."""


class EncodingError(CAError):
	"""The private key could not be marshaled to PKCS#8."""


class PersistenceError(CAError):
	"""An output file could not be created or written."""

	def __init__(self, message: str, path=None):
		super().__init__(message)
		self.path = path
