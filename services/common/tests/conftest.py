import urllib.request

import pytest


class _DummySinkResponse:
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def read(self):
        return b"ok"


@pytest.fixture(autouse=True)
def _mock_log_sink(monkeypatch):
    monkeypatch.setattr(urllib.request, "urlopen", lambda *args, **kwargs: _DummySinkResponse())
