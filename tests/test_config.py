import pytest

from selfca.common.config import CAConfig, load_config
from selfca.common.errors import ConfigError


def test_defaults_match_classic_ca():
    cfg = CAConfig()
    assert cfg.organization == "SpaceY"
    assert cfg.country == "US"
    assert cfg.validity_months == 1
    assert cfg.curve == "P-521"
    assert cfg.ext_key_usage_any is True
    assert cfg.serial is None
    assert cfg.locality == "" and cfg.postal_code == ""


def test_environment_is_read():
    env = {"CA_ORGANIZATION": "EnvOrg", "CA_SERIAL": "42", "CA_EXT_KEY_USAGE_ANY": "false", "CA_CURVE": ""}
    cfg = load_config(dotenv=False, environ=env)
    assert cfg.organization == "EnvOrg"
    assert cfg.serial == 42
    assert cfg.ext_key_usage_any is False
    assert cfg.curve == "P-521"


def test_overrides_beat_environment():
    env = {"CA_ORGANIZATION": "EnvOrg"}
    cfg = load_config(dotenv=False, environ=env, organization="FlagOrg", country=None)
    assert cfg.organization == "FlagOrg"
    assert cfg.country == "US"


def test_dotenv_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("CA_ORGANIZATION=DotenvOrg\nCA_VALIDITY_MONTHS=3\n")
    cfg = load_config()
    assert cfg.organization == "DotenvOrg"
    assert cfg.validity_months == 3


def test_country_normalised():
    assert CAConfig(country="de").country == "DE"


@pytest.mark.parametrize("overrides", [
    {"country": "USA"},
    {"organization": ""},
    {"organization": "a/b"},
    {"validity_months": 0},
    {"serial": 0},
    {"serial": 1 << 159},
    {"curve": "P-224"},
    {"colour": "blue"},
])
def test_invalid_values(overrides):
    with pytest.raises(ConfigError):
        load_config(dotenv=False, environ={}, **overrides)


@pytest.mark.parametrize("org", ["Bad\x00Org", "Tab\tOrg", "New\nLine"])
def test_control_characters_rejected(org):
    with pytest.raises(ConfigError, match="control characters"):
        load_config(dotenv=False, environ={}, organization=org)
