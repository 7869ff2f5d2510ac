"""Unit tests for the FastAPI app factory and configuration."""

from fastapi import FastAPI

from toolsmith_server import __version__, create_app
from toolsmith_server.config import ToolsmithServerSettings


def test_create_app_returns_fastapi_instance():
    """Test that create_app returns a FastAPI instance."""
    app = create_app()
    assert isinstance(app, FastAPI)


def test_create_app_metadata(test_settings):
    """Test that app has correct metadata."""
    app = create_app(settings=test_settings)
    assert app.title == "toolsmith-server"
    assert app.version == "0.1.0"


def test_create_app_includes_routers(test_settings):
    """Test that all routers are registered."""
    app = create_app(settings=test_settings)

    routes = [route.path for route in app.routes]  # type: ignore[attr-defined]
    assert "/api/v1/health" in routes
    assert "/api/v1/tools" in routes
    assert "/api/v1/tools/search" in routes
    assert "/api/v1/tools/{name}/invoke" in routes
    assert "/api/v1/plans/run" in routes
    assert "/api/v1/patterns" in routes
    assert "/api/v1/discovery/config" in routes
    assert "/api/v1/discovery/refresh" in routes


def test_create_app_has_cors_middleware(test_settings):
    """Test that CORS middleware is configured."""
    app = create_app(settings=test_settings)

    middleware_classes = [m.cls.__name__ for m in app.user_middleware]  # type: ignore[attr-defined]
    assert "CORSMiddleware" in middleware_classes


def test_version_constant():
    """Test that __version__ is defined and matches app version."""
    assert __version__ == "0.1.0"


def test_settings_default_values():
    """Test that settings have correct default values."""
    settings = ToolsmithServerSettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.backend_url == "http://localhost:8080"
    assert settings.default_cache_ttl_seconds == 3600
    assert settings.discovery_lock_enabled is True
    assert settings.log_level == "INFO"


def test_settings_env_prefix(monkeypatch):
    """Test that settings respect TOOLSMITH_ environment variable prefix."""
    monkeypatch.setenv("TOOLSMITH_PORT", "9000")
    monkeypatch.setenv("TOOLSMITH_BACKEND_URL", "https://org.example.com/")

    settings = ToolsmithServerSettings()

    assert settings.port == 9000
    assert settings.backend_base_url == "https://org.example.com/api/data/v9.2"


def test_settings_resolved_paths(tmp_path):
    """Test that the configuration record path resolves under data_dir."""
    settings = ToolsmithServerSettings(data_dir=str(tmp_path), config_file="cfg.json")

    assert settings.resolved_config_path == tmp_path / "cfg.json"
