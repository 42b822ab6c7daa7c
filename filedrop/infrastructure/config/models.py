"""
Configuration models and data structures.

This module defines the configuration models used throughout the application,
providing type safety and validation for configuration values.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ...core.exceptions import ConfigurationError

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class UploadConfig:
    """Upload policy and destination."""
    upload_url: str = "uploads"
    max_file_size: int = 10 * 1024 * 1024
    allowed_types: List[str] = field(default_factory=list)
    max_concurrent_uploads: int = 0
    field_name: str = "file"


@dataclass
class TransportConfig:
    """Transport tuning."""
    timeout: float = 300.0
    chunk_size: int = 64 * 1024
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    name: str = "filedrop"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    upload: UploadConfig = field(default_factory=UploadConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        if not self.upload.upload_url:
            raise ConfigurationError("upload.upload_url must not be empty")
        if self.upload.max_file_size < 0:
            raise ConfigurationError(
                f"upload.max_file_size must not be negative, got {self.upload.max_file_size}")
        if self.upload.max_concurrent_uploads < 0:
            raise ConfigurationError(
                "upload.max_concurrent_uploads must not be negative, "
                f"got {self.upload.max_concurrent_uploads}")
        if self.transport.timeout <= 0:
            raise ConfigurationError(
                f"transport.timeout must be positive, got {self.transport.timeout}")
        if self.transport.chunk_size <= 0:
            raise ConfigurationError(
                f"transport.chunk_size must be positive, got {self.transport.chunk_size}")
        if self.logging.level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.logging.level}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        try:
            upload_config = UploadConfig(**data.get('upload', {}))
            transport_config = TransportConfig(**data.get('transport', {}))
            logging_config = LoggingConfig(**data.get('logging', {}))
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration section: {e}")

        return cls(
            name=data.get('name', 'filedrop'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            upload=upload_config,
            transport=transport_config,
            logging=logging_config,
            config_file_path=data.get('config_file_path')
        )
