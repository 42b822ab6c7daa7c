"""
Tests for configuration models.
"""

import pytest

from filedrop.core.exceptions import ConfigurationError
from filedrop.infrastructure.config.models import (
    ApplicationConfig, LoggingConfig, TransportConfig, UploadConfig
)


class TestApplicationConfig:
    """Test cases for ApplicationConfig."""

    def test_defaults(self):
        config = ApplicationConfig()

        assert config.name == "filedrop"
        assert config.upload.upload_url == "uploads"
        assert config.upload.allowed_types == []
        assert config.upload.max_concurrent_uploads == 0
        assert config.transport.timeout == 300.0
        assert config.logging.level == "INFO"
        assert not config.logging.file_enabled

    @pytest.mark.parametrize("kwargs,match", [
        ({"upload": UploadConfig(upload_url="")}, "upload_url"),
        ({"upload": UploadConfig(max_file_size=-1)}, "max_file_size"),
        ({"upload": UploadConfig(max_concurrent_uploads=-2)}, "max_concurrent_uploads"),
        ({"transport": TransportConfig(timeout=0)}, "timeout"),
        ({"transport": TransportConfig(chunk_size=0)}, "chunk_size"),
        ({"logging": LoggingConfig(level="LOUD")}, "Unknown log level"),
    ])
    def test_invalid_values(self, kwargs, match):
        with pytest.raises(ConfigurationError, match=match):
            ApplicationConfig(**kwargs)

    def test_lowercase_level_accepted(self):
        ApplicationConfig(logging=LoggingConfig(level="debug"))

    def test_to_dict(self):
        data = ApplicationConfig().to_dict()

        assert data["upload"]["max_file_size"] == 10 * 1024 * 1024
        assert data["transport"]["chunk_size"] == 64 * 1024
        assert data["logging"]["backup_count"] == 5

    def test_from_dict_round_trip(self):
        original = ApplicationConfig(upload=UploadConfig(upload_url="https://x/upload"))

        restored = ApplicationConfig.from_dict(original.to_dict())

        assert restored == original

    def test_from_dict_partial_sections(self):
        config = ApplicationConfig.from_dict({"upload": {"max_file_size": 5}})

        assert config.upload.max_file_size == 5
        assert config.upload.upload_url == "uploads"

    def test_from_dict_invalid_section(self):
        with pytest.raises(ConfigurationError):
            ApplicationConfig.from_dict({"transport": {"retries": 3}})
