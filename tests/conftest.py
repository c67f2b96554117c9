import pytest

from utils import cache


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Keep the JSON caches and the log file out of the working tree."""
    data = tmp_path / "data"
    monkeypatch.setattr(cache, "tweet_cache_file_path", str(data / "tweet_cache.json"))
    monkeypatch.setattr(cache, "launch_cache_file_path", str(data / "launch_cache.json"))
    monkeypatch.delenv("LOG_FILE", raising=False)
    return data
