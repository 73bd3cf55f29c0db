"""
Configuration Manager

Single entry point microservices use to read their configuration.

Usage:
    from core.config_manager import ConfigManager

    config_manager = ConfigManager("campaign_service")
    config = config_manager.get_service_config()
    host, port = config_manager.discover_service(
        service_name="postgres_service",
        default_host="localhost",
        default_port=5432,
        env_host_key="POSTGRES_HOST",
        env_port_key="POSTGRES_PORT",
    )
"""

import logging
import os
from typing import Optional, Tuple

from core.config import InfraConfig, LoggingConfig, ServiceConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads and caches the config sections for one service"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.environment = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        self._service_config: Optional[ServiceConfig] = None
        self._infra_config: Optional[InfraConfig] = None
        self._logging_config: Optional[LoggingConfig] = None

    def get_service_config(self) -> ServiceConfig:
        """Get per-service runtime settings"""
        if self._service_config is None:
            self._service_config = ServiceConfig.from_env(self.service_name)
        return self._service_config

    def get_infra_config(self) -> InfraConfig:
        """Get infrastructure endpoints"""
        if self._infra_config is None:
            self._infra_config = InfraConfig.from_env()
        return self._infra_config

    def get_logging_config(self) -> LoggingConfig:
        """Get logging settings"""
        if self._logging_config is None:
            self._logging_config = LoggingConfig.from_env()
        return self._logging_config

    def discover_service(
        self,
        service_name: str,
        default_host: str,
        default_port: int,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Resolve host and port for a dependency.

        Priority: environment variables, then the given defaults.
        """
        host = os.getenv(env_host_key) if env_host_key else None
        port_value = os.getenv(env_port_key) if env_port_key else None

        try:
            port = int(port_value) if port_value else default_port
        except ValueError:
            logger.warning(f"Invalid port '{port_value}' for {service_name}, using {default_port}")
            port = default_port

        resolved = (host or default_host, port)
        logger.debug(f"Resolved {service_name} -> {resolved[0]}:{resolved[1]}")
        return resolved

    def print_config_summary(self, show_secrets: bool = False) -> None:
        """Log the effective configuration (development aid)"""
        service = self.get_service_config()
        infra = self.get_infra_config()
        password = infra.postgres_password if show_secrets else "***"

        logger.info(f"Configuration for {self.service_name} ({self.environment})")
        logger.info(f"  port={service.service_port} debug={service.debug} log_level={service.log_level}")
        logger.info(
            f"  postgres={infra.postgres_user}:{password}@{infra.postgres_host}:"
            f"{infra.postgres_port}/{infra.postgres_db}"
        )
        logger.info(f"  nats={infra.resolved_nats_url} enabled={infra.nats_enabled} required={service.nats_required}")
        logger.info(f"  completion_cron='{service.completion_cron}' tz={service.completion_timezone}")


__all__ = ["ConfigManager"]
