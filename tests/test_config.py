"""Tests for environment-driven settings."""

from pathlib import Path

from motormind.config import BASE_DIR, load_settings


def test_defaults(monkeypatch):
    for name in ("GEMINI_MODEL", "INVENTORY_PATH", "CORS_ORIGINS", "ORACLE_TEMPERATURE", "SEED_ON_STARTUP"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.gemini_model == "gemini-2.5-flash"
    assert settings.oracle_temperature == 0.2
    assert settings.inventory_path == BASE_DIR / "data" / "inventory.json"
    assert settings.cors_origins == ["http://localhost:5173"]
    assert settings.seed_on_startup is True
    assert (settings.prompts_dir / "extract_request.txt").exists()


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("INVENTORY_PATH", str(tmp_path / "inv.json"))
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("SEED_ON_STARTUP", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.inventory_path == Path(tmp_path / "inv.json")
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.seed_on_startup is False
    assert settings.log_level == "DEBUG"
