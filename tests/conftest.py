import pytest

from botguard.config import env_name
from botguard.executable import StaticResolver


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Every test starts with an empty allowlist and the default executables."""
    monkeypatch.setenv(env_name("paths"), "")
    monkeypatch.setenv(env_name("executables"), "")


@pytest.fixture
def allow(monkeypatch):
    def _allow(*paths):
        monkeypatch.setenv(env_name("paths"), ",".join(str(p) for p in paths))

    return _allow


@pytest.fixture
def resolver():
    return StaticResolver(
        {
            "node": ["/usr/bin/node"],
            "python3": ["/usr/bin/python3", "/usr/local/bin/python3"],
        }
    )
