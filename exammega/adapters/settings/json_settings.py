"""
JSON-file settings store.
SETTINGS_PATH env var (default ~/.exammega/settings.json) selects the file.
The whole file is rewritten on every change; it only ever holds a few keys.
"""
import json
import os
from pathlib import Path
from exammega.adapters.settings.base import SettingsStore

DEFAULT_PATH = Path.home() / ".exammega" / "settings.json"
FILE_MODE = 0o600

class JsonFileSettings(SettingsStore):
    def __init__(self, status_store, path: str | Path | None = None):
        self.status = status_store
        self.path = Path(path or os.getenv("SETTINGS_PATH") or DEFAULT_PATH)

    def _load(self) -> dict:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.status.log(f"json_settings: unreadable {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        # owner-only: the file holds the API key
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.chmod(tmp, FILE_MODE)
        os.replace(tmp, self.path)

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str):
        data = self._load()
        data[key] = value
        self._save(data)
        self.status.log(f"json_settings: saved {key}")

    def delete(self, key: str):
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)
            self.status.log(f"json_settings: removed {key}")
