"""
Campaign Service

Fundraising campaign microservice providing:
- Campaign lifecycle management (create, update, delete)
- Ownership-scoped updates with validated donation terms
- campaign.created / campaign.deleted events over NATS JetStream
- Scheduled completion of campaigns past their deadline

Port: 8240
"""

__version__ = "1.0.0"
__service__ = "campaign_service"
