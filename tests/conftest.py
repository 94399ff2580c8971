import pytest

from exammega.adapters.settings.memory_settings import MemorySettings
from fakes import FakeCamera, RecordingStatus


@pytest.fixture
def status():
    return RecordingStatus()


@pytest.fixture
def settings():
    return MemorySettings()


@pytest.fixture
def camera():
    return FakeCamera()
