import os
import stat

from tools.credential_store import LocalCredentialStore, mask_api_key, resolve_api_key


def test_store_round_trip_and_permissions(tmp_path):
    store = LocalCredentialStore(tmp_path / "nested" / "credentials.json")

    assert store.get("openai_api_key") is None
    store.set("openai_api_key", "sk-local")

    assert store.get("openai_api_key") == "sk-local"
    if os.name == "posix":
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

    assert store.delete("openai_api_key") is True
    assert store.delete("openai_api_key") is False
    assert store.get("openai_api_key") is None


def test_corrupt_store_reads_as_empty(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text("{not json", encoding="utf-8")

    assert LocalCredentialStore(path).get("openai_api_key") is None


def test_environment_key_takes_precedence(tmp_path, monkeypatch):
    store = LocalCredentialStore(tmp_path / "credentials.json")
    store.set("openai_api_key", "sk-stored")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

    assert resolve_api_key(store) == "sk-env"


def test_placeholder_or_blank_environment_key_falls_back_to_store(tmp_path, monkeypatch):
    store = LocalCredentialStore(tmp_path / "credentials.json")
    store.set("openai_api_key", "sk-stored")

    for value in ("your_openai_api_key_here", "   "):
        monkeypatch.setenv("OPENAI_API_KEY", value)
        assert resolve_api_key(store) == "sk-stored"


def test_no_usable_key_resolves_to_none(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert resolve_api_key(LocalCredentialStore(tmp_path / "credentials.json")) is None


def test_mask_api_key():
    assert mask_api_key("sk-abcdefghijklmnop1234") == "sk-" + "*" * 16 + "1234"
    assert mask_api_key("short") == "*****"
    assert mask_api_key("") == ""
