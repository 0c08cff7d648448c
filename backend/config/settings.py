"""
Configuration Management for DockDash
Centralizes all environment-based configuration and settings
"""

import os
import logging
from logging.handlers import RotatingFileHandler


def setup_logging(level: str = None):
    """Configure application logging with rotation"""
    from .paths import LOG_DIR

    # Create logs directory with secure permissions
    os.makedirs(LOG_DIR, mode=0o700, exist_ok=True)

    root_logger = logging.getLogger()

    # Close and clear any existing handlers to prevent file descriptor leaks
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    log_level = getattr(logging, (level or AppConfig.LOG_LEVEL).upper(), logging.INFO)
    root_logger.setLevel(log_level)

    # Console handler for stdout
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)

    # File handler with rotation for application logs
    # Max 10MB per file, keep 14 backups
    file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, 'dockdash.log'),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=14,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(console_formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Docker SDK and httpx log every request at DEBUG/INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


class AppConfig:
    """Main application configuration"""

    from .paths import DATABASE_PATH as DEFAULT_DATABASE_PATH, DEFAULT_ICON_MAPPINGS_FILE

    # Database settings
    DATABASE_PATH = os.getenv('DOCKDASH_DATABASE_PATH', DEFAULT_DATABASE_PATH)

    # Docker engine connection
    DOCKER_SOCKET = os.getenv('DOCKDASH_DOCKER_SOCKET', '/var/run/docker.sock')

    # Icon catalog (Homarr dashboard icons served through jsDelivr)
    ICON_BASE_URL = os.getenv(
        'DOCKDASH_ICON_BASE_URL',
        'https://cdn.jsdelivr.net/gh/homarr-labs/dashboard-icons'
    ).rstrip('/')
    ICON_MAPPINGS_FILE = os.getenv('DOCKDASH_ICON_MAPPINGS_FILE', DEFAULT_ICON_MAPPINGS_FILE)
    ICON_CHECK_TIMEOUT = float(os.getenv('DOCKDASH_ICON_CHECK_TIMEOUT', 5))
    DEFAULT_ICON = os.getenv('DOCKDASH_DEFAULT_ICON', 'Server')

    # Logging
    LOG_LEVEL = os.getenv('DOCKDASH_LOG_LEVEL', 'INFO')

    @classmethod
    def docker_url(cls) -> str:
        """Docker SDK base URL for the configured socket"""
        if '://' in cls.DOCKER_SOCKET:
            return cls.DOCKER_SOCKET
        return f"unix://{cls.DOCKER_SOCKET}"

    @classmethod
    def validate(cls):
        """Validate configuration"""
        if cls.ICON_CHECK_TIMEOUT <= 0:
            raise ValueError(f"Icon check timeout must be positive: {cls.ICON_CHECK_TIMEOUT}")

        if not cls.ICON_BASE_URL.startswith(('http://', 'https://')):
            raise ValueError(f"Icon base URL must be http(s): {cls.ICON_BASE_URL}")

        if not cls.DEFAULT_ICON.strip():
            raise ValueError("Default icon cannot be empty")

        return True
