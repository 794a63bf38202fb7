"""
Tests for environment-driven configuration.
"""
import pytest

from palette_maker.config import Config


def test_defaults_pass_check():
    """Shipped defaults are within range"""
    Config.check()


def test_allowed_origins_parsing(monkeypatch):
    """Blank entries are dropped from the origin list"""
    monkeypatch.setattr(Config, "ALLOWED_ORIGINS", " http://a.test, ,http://b.test ")
    assert Config.allowed_origins() == ["http://a.test", "http://b.test"]


@pytest.mark.parametrize("attr, value", [
    ("MAX_DIMENSION", 8),
    ("CLUSTER_COUNT", 4),
    ("THUMBNAIL_QUALITY", 0),
])
def test_check_rejects_out_of_range(monkeypatch, attr, value):
    """Out-of-range settings fail fast"""
    monkeypatch.setattr(Config, attr, value)
    with pytest.raises(ValueError):
        Config.check()
