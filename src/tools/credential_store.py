import json
import os
from pathlib import Path
from typing import Dict, Optional

from configs.settings import Config
from tools.logger import setup_logger

logger = setup_logger("credential-store")


class LocalCredentialStore:
    """
    Small JSON key-value file for secrets kept on this machine.

    Example:
        >>> store = LocalCredentialStore(Path("~/.tos_risk/credentials.json").expanduser())
        >>> store.set("openai_api_key", "sk-...")
        >>> store.get("openai_api_key")
        'sk-...'
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else Config.CREDENTIAL_STORE_PATH

    # -------------------------------------------------
    # Public API
    # -------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str):
        data = self._read()
        data[key] = value
        self._write(data)
        logger.info(f"Stored credential '{key}'")

    def delete(self, key: str) -> bool:
        data = self._read()
        if key not in data:
            return False
        del data[key]
        self._write(data)
        return True

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable credential store: {self.path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            logger.warning(f"Could not restrict permissions on {self.path}")


def _usable(key: Optional[str]) -> bool:
    return bool(key and key.strip() and key.strip() != Config.API_KEY_PLACEHOLDER)


def resolve_api_key(store: Optional[LocalCredentialStore] = None) -> Optional[str]:
    """
    The environment key wins unless it is missing or still the placeholder;
    the locally stored key is used otherwise.
    """
    env_key = os.getenv("OPENAI_API_KEY")
    if _usable(env_key):
        return env_key.strip()

    store = store or LocalCredentialStore()
    stored = store.get(Config.API_KEY_STORE_KEY)
    if _usable(stored):
        return stored.strip()
    return None


def mask_api_key(api_key: str) -> str:
    """
    Example:
        >>> mask_api_key("sk-abcdefghijklmnop1234")
        'sk-****************1234'
    """
    if not api_key:
        return ""
    if len(api_key) <= 7:
        return "*" * len(api_key)
    return f"{api_key[:3]}{'*' * 16}{api_key[-4:]}"
