#!/usr/bin/env python3
"""Service runtime configuration

Per-process settings for a campaign service instance: HTTP port, completion
job cadence and event publishing behaviour.
"""
import os
from dataclasses import dataclass
from typing import Optional

def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class ServiceConfig:
    """Runtime settings for a single service"""

    service_name: str = "campaign_service"
    service_host: str = "0.0.0.0"
    service_port: int = 8240
    debug: bool = False
    log_level: str = "INFO"

    # ===========================================
    # Completion job
    # ===========================================
    # Standard 5-field crontab, default is daily at midnight
    completion_cron: str = "0 0 * * *"
    completion_timezone: str = "UTC"
    completion_enabled: bool = True

    # ===========================================
    # Events
    # ===========================================
    events_stream: str = "campaign-events"
    event_publish_timeout: float = 5.0
    nats_required: bool = False

    # ===========================================
    # Peer access
    # ===========================================
    # Explicit base URL for peers; host/port discovery is used when unset
    campaign_service_url: Optional[str] = None

    @classmethod
    def from_env(cls, service_name: str = "campaign_service") -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        port = _int(os.getenv("SERVICE_PORT", "8240"), 8240)
        return cls(
            service_name=service_name,
            service_host=os.getenv("SERVICE_HOST", "0.0.0.0"),
            service_port=port,
            debug=_bool(os.getenv("DEBUG", "false")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),

            completion_cron=os.getenv("COMPLETION_CRON", "0 0 * * *"),
            completion_timezone=os.getenv("COMPLETION_TIMEZONE", "UTC"),
            completion_enabled=_bool(os.getenv("COMPLETION_ENABLED", "true")),

            events_stream=os.getenv("CAMPAIGN_EVENTS_STREAM", "campaign-events"),
            event_publish_timeout=_float(os.getenv("EVENT_PUBLISH_TIMEOUT", "5"), 5.0),
            nats_required=_bool(os.getenv("NATS_REQUIRED", "false")),

            campaign_service_url=os.getenv("CAMPAIGN_SERVICE_URL") or None,
        )
