import os
import sys

import pytest

# Qt widgets/icons need a platform plugin even on headless CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import config_manager


@pytest.fixture(autouse=True)
def fresh_defaults(monkeypatch):
    """Every test starts with unfrozen global defaults."""
    manager = config_manager.ConfigManager()
    monkeypatch.setattr(config_manager, "config", manager)
    return manager


@pytest.fixture
def sample_files():
    return [
        {"id": "docs", "name": "docs", "isDir": True},
        {"id": "src", "name": "src", "isDir": True},
        {"id": "readme", "name": "readme.md", "size": 1024, "modDate": 3000},
        {"id": "main", "name": "main.py", "size": 4096, "modDate": 4000},
        {"id": "data", "name": "data.csv", "size": 512, "modDate": 1500},
        {"id": "env", "name": ".env", "size": 10},
    ]
