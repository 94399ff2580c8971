from abc import ABC, abstractmethod

API_KEY_SETTING = "gemini_api_key"

class SettingsStore(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    def set(self, key: str, value: str):
        ...

    @abstractmethod
    def delete(self, key: str):
        ...
