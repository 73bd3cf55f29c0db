"""
Integration Tests for Campaign Service

Test Layer 3: repository and event bus against real infrastructure.

Infrastructure: PostgreSQL, NATS
"""
