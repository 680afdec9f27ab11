import pytest

import main
from configs.settings import Config
from tools.credential_store import LocalCredentialStore


def test_set_key_stores_and_masks(tmp_path, monkeypatch, capsys):
    path = tmp_path / "credentials.json"
    monkeypatch.setattr(Config, "CREDENTIAL_STORE_PATH", path)

    code = main.main(["--mode", "set-key", "--key", "sk-abcdefghijklmnop1234"])

    assert code == 0
    assert LocalCredentialStore(path).get("openai_api_key") == "sk-abcdefghijklmnop1234"
    assert "sk-****************1234" in capsys.readouterr().out


def test_set_key_without_key_fails(capsys):
    assert main.main(["--mode", "set-key"]) == 1
    assert "No API key given." in capsys.readouterr().err


def test_file_mode_requires_a_path():
    with pytest.raises(SystemExit):
        main.main(["--mode", "file"])


def test_analysis_failure_exits_non_zero_and_closes_client(monkeypatch, capsys):
    client = _Unconfigured()
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(main, "GenerationClient", lambda: client)

    code = main.main(["--mode", "text", "--text", "   "])

    assert code == 1
    assert "Analysis failed" in capsys.readouterr().err
    assert client.closed is True


def test_verify_key_closes_client(monkeypatch, capsys):
    client = _Unconfigured()
    monkeypatch.setattr(main, "GenerationClient", lambda: client)

    assert main.main(["--mode", "verify-key", "--key", "sk-test"]) == 0
    assert "API key is valid." in capsys.readouterr().out
    assert client.closed is True


class _Unconfigured:
    def __init__(self):
        self.closed = False

    async def generate(self, prompt):
        raise AssertionError("blank text must not reach generation")

    async def verify_credential(self, api_key=None):
        return True

    async def aclose(self):
        self.closed = True
