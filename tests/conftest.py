import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import settings as settings_module


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    for name in ("TESTPILOT_LLM_API_ENDPOINT", "TESTPILOT_LLM_AUTH_HEADERS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
