"""
Unit tests for knowledge graph configuration.

Validates defaults, env var loading, range checks and SecretStr handling.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestStorageSettings:
    """Test StorageSettings pydantic model."""

    def test_defaults(self):
        from mcp_knowledge_graph.config import StorageSettings

        with patch.dict(os.environ, {}, clear=True):
            cfg = StorageSettings()

        assert cfg.backend == "memory"
        assert cfg.redis_url == "redis://localhost:6379"
        assert cfg.redis_password is None
        assert cfg.key_prefix == "mcp:kg:"
        assert cfg.max_connections == 16
        assert cfg.timeout_seconds is None

    def test_env_override(self):
        from mcp_knowledge_graph.config import StorageSettings

        env = {
            "MCP_KG_STORAGE_BACKEND": "redis",
            "MCP_KG_STORAGE_REDIS_URL": "redis://cache:6380/2",
            "MCP_KG_STORAGE_KEY_PREFIX": "test:kg:",
            "MCP_KG_STORAGE_MAX_CONNECTIONS": "32",
            "MCP_KG_STORAGE_TIMEOUT_SECONDS": "2.5",
        }

        with patch.dict(os.environ, env, clear=False):
            cfg = StorageSettings()

        assert cfg.backend == "redis"
        assert cfg.redis_url == "redis://cache:6380/2"
        assert cfg.key_prefix == "test:kg:"
        assert cfg.max_connections == 32
        assert cfg.timeout_seconds == 2.5

    def test_password_is_secretstr(self):
        """Password must not appear in repr/str."""
        from mcp_knowledge_graph.config import StorageSettings

        with patch.dict(os.environ, {"MCP_KG_STORAGE_REDIS_PASSWORD": "hunter2"}, clear=False):
            cfg = StorageSettings()

        assert "hunter2" not in repr(cfg)
        assert "hunter2" not in str(cfg.redis_password)
        assert cfg.redis_password.get_secret_value() == "hunter2"

    def test_validation(self):
        from mcp_knowledge_graph.config import StorageSettings

        with pytest.raises(ValidationError):
            StorageSettings(backend="sqlite")
        with pytest.raises(ValidationError):
            StorageSettings(max_connections=0)
        with pytest.raises(ValidationError):
            StorageSettings(timeout_seconds=0)


class TestQuerySettings:
    def test_defaults(self):
        from mcp_knowledge_graph.config import QuerySettings

        cfg = QuerySettings()
        assert cfg.max_depth_limit == 10
        assert cfg.max_path_results == 1000
        assert cfg.top_n == 10
        assert cfg.member_preview == 10
        assert cfg.conflict_preview == 20

    def test_env_override(self):
        from mcp_knowledge_graph.config import QuerySettings

        with patch.dict(os.environ, {"MCP_KG_QUERY_MAX_PATH_RESULTS": "50", "MCP_KG_QUERY_TOP_N": "3"}, clear=False):
            cfg = QuerySettings()

        assert cfg.max_path_results == 50
        assert cfg.top_n == 3

    def test_depth_limit_bounds(self):
        from mcp_knowledge_graph.config import QuerySettings

        with pytest.raises(ValidationError):
            QuerySettings(max_depth_limit=0)
        with pytest.raises(ValidationError):
            QuerySettings(max_depth_limit=51)


class TestServerAndLoggingSettings:
    def test_port_validation(self):
        from mcp_knowledge_graph.config import ServerSettings

        with pytest.raises(ValidationError):
            ServerSettings(port=0)
        with pytest.raises(ValidationError):
            ServerSettings(port=70000)

    def test_transport_override(self):
        from mcp_knowledge_graph.config import ServerSettings

        with patch.dict(os.environ, {"MCP_KG_SERVER_TRANSPORT": "stdio"}, clear=False):
            assert ServerSettings().transport == "stdio"

    def test_log_level_validation(self):
        from mcp_knowledge_graph.config import LoggingSettings

        with patch.dict(os.environ, {"MCP_KG_LOG_LEVEL": "DEBUG"}, clear=False):
            assert LoggingSettings().level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")

    def test_settings_composes_groups(self):
        from mcp_knowledge_graph.config import Settings

        cfg = Settings()
        assert cfg.storage.backend == "memory"
        assert cfg.query.max_depth_limit == 10
        assert cfg.server.port == 8000
        assert cfg.logging.level == "INFO"
