import pytest
from pydantic import ValidationError

from pushrelay.config import load_settings
from pushrelay.config.loader import load_config
from pushrelay.config.schema import FeedConfig, PushRelayConfig
from pushrelay.constants import EXPO_PUSH_URL


def test_missing_file_yields_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yml")

    assert config == PushRelayConfig()
    assert config.provider == "fcm"
    assert config.feed.messages_collection == "messages"
    assert config.feed.recipient_field == "to"
    assert config.probe.accept_unregistered is True
    assert config.expo.base_url == EXPO_PUSH_URL


def test_config_valid_with_env_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("PUSHRELAY_TEST_EXPO_TOKEN", "tok-secret")
    config_path = tmp_path / "pushrelay.yml"
    config_path.write_text(
        """
provider: expo
expo:
  access_token: "${PUSHRELAY_TEST_EXPO_TOKEN}"
  timeout_s: 3
feed:
  messages_collection: chats
  users_collection: profiles
  display_name_field: name
probe:
  accept_unregistered: false
""",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.provider == "expo"
    assert config.expo.access_token == "tok-secret"
    assert config.expo.timeout_s == 3
    assert config.feed.messages_collection == "chats"
    assert config.feed.users_collection == "profiles"
    assert config.feed.display_name_field == "name"
    assert config.probe.accept_unregistered is False


def test_unknown_provider_rejected(tmp_path):
    config_path = tmp_path / "pushrelay.yml"
    config_path.write_text("provider: pigeon\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_config(config_path)


@pytest.mark.parametrize("name", ["", "messages/inner"])
def test_collection_names_validated(name):
    with pytest.raises(ValidationError):
        FeedConfig(messages_collection=name)


def test_unknown_keys_are_kept(tmp_path):
    config_path = tmp_path / "pushrelay.yml"
    config_path.write_text("surprise: 1\nfeed:\n  extra_field: x\n", encoding="utf-8")

    config = load_config(config_path)

    assert config.model_extra == {"surprise": 1}
    assert config.feed.model_extra == {"extra_field": "x"}


def test_empty_file_yields_defaults(tmp_path):
    config_path = tmp_path / "pushrelay.yml"
    config_path.write_text("", encoding="utf-8")

    assert load_config(config_path) == PushRelayConfig()


def test_load_settings_reads_dotenv_before_config(tmp_path, monkeypatch):
    # Register the variable with monkeypatch so the value loaded from .env is removed afterwards.
    monkeypatch.setenv("PUSHRELAY_TEST_PROJECT", "placeholder")
    monkeypatch.delenv("PUSHRELAY_TEST_PROJECT")
    env_path = tmp_path / ".env"
    env_path.write_text("PUSHRELAY_TEST_PROJECT=demo-project\n", encoding="utf-8")
    config_path = tmp_path / "pushrelay.yml"
    config_path.write_text('firebase:\n  project_id: "${PUSHRELAY_TEST_PROJECT}"\n', encoding="utf-8")
    monkeypatch.setenv("PUSHRELAY_ENV_PATH", str(env_path))
    monkeypatch.setenv("PUSHRELAY_CONFIG_PATH", str(config_path))

    config = load_settings()

    assert config.firebase.project_id == "demo-project"
