"""
Campaign Event Publishers

Serializes campaign events into JSON envelopes and hands them to the
event bus (NATS JetStream) under their routing key.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from ..protocols import EventBusProtocol, EventSerializationError
from .models import CampaignEventType

logger = logging.getLogger(__name__)


class CampaignEventPublisher:
    """Publisher for campaign service events"""

    def __init__(self, event_bus: Optional[EventBusProtocol] = None, source: str = "campaign_service"):
        self.event_bus = event_bus
        self.source = source

    def build_event(self, event_type: CampaignEventType, data: BaseModel) -> bytes:
        """
        Encode an event envelope.

        Envelope: {event_id, event_type, source, timestamp, data}

        Raises:
            EventSerializationError: if the data cannot be encoded
        """
        try:
            event = {
                "event_id": str(uuid.uuid4()),
                "event_type": event_type.value,
                "source": self.source,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "data": data.model_dump(mode="json"),
            }
            return json.dumps(event).encode("utf-8")
        except Exception as e:
            raise EventSerializationError(f"Cannot serialize {event_type.value} event: {e}") from e

    async def publish(self, event_type: CampaignEventType, data: BaseModel) -> bool:
        """
        Publish an event.

        Returns:
            True if handed to the bus, False when no bus is configured

        Raises:
            EventSerializationError: if the payload cannot be encoded
            Exception: whatever the event bus raises on publish failure
        """
        payload = self.build_event(event_type, data)

        if not self.event_bus:
            logger.debug(f"Event bus not configured, skipping publish: {event_type.value}")
            return False

        await self.event_bus.publish(event_type.value, payload)
        logger.debug(f"Published event: {event_type.value}")
        return True


__all__ = ["CampaignEventPublisher"]
