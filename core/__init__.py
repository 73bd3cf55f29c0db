#!/usr/bin/env python3
"""
Core Module for Microservices Architecture

Shared infrastructure components for the microservices in this repository.

COMPONENTS:
    - config/: Dataclass configuration loaded from the environment (python-dotenv)
    - config_manager.py: Centralized configuration access and endpoint resolution
    - logger.py: Process-wide logging setup
    - postgres_client.py: asyncpg connection pool wrapper
    - nats_client.py: NATS JetStream event bus

USAGE:
    from core.config_manager import ConfigManager
    from core.logger import setup_service_logger

    # Initialize configuration for a service
    config = ConfigManager("service_name")
"""

__version__ = "2.0.0"
