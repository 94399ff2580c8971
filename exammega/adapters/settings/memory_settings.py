from exammega.adapters.settings.base import SettingsStore

class MemorySettings(SettingsStore):
    """Process-local store, nothing survives a restart."""

    def __init__(self, initial: dict | None = None):
        self._values = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str):
        self._values[key] = value

    def delete(self, key: str):
        self._values.pop(key, None)
