from datetime import datetime, timezone

import pytest

from selfca.common.config import CAConfig
from selfca.crypto.builder import build_self_signed_ca


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SERIAL", "ORGANIZATION", "COUNTRY", "PROVINCE", "LOCALITY",
                 "STREET_ADDRESS", "POSTAL_CODE", "VALIDITY_MONTHS", "CURVE",
                 "EXT_KEY_USAGE_ANY"):
        monkeypatch.delenv(f"CA_{name}", raising=False)


@pytest.fixture
def config():
    return CAConfig(serial=1337, organization="TestOrg")


@pytest.fixture(scope="module")
def pki():
    return build_self_signed_ca(CAConfig(serial=1337, organization="TestOrg"))


@pytest.fixture
def jan31():
    return datetime(2025, 1, 31, 12, 30, 15, tzinfo=timezone.utc)
