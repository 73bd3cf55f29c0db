"""
PostgreSQL Client

Async PostgreSQL access over an asyncpg connection pool.
Provides config-driven host/port resolution and a consistent query API.

Usage:
    from core.postgres_client import AsyncPostgresClient

    db = AsyncPostgresClient("campaign_service")

    # Execute queries
    async with db:
        rows = await db.query("SELECT * FROM campaign.campaigns WHERE owner_id = $1", [owner_id])
"""

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import asyncpg

if TYPE_CHECKING:
    from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class AsyncPostgresClient:
    """
    PostgreSQL client backed by an asyncpg pool.

    The pool is created lazily on first use (or on ``async with``) and
    reused until ``close()``.
    """

    def __init__(
        self,
        service_name: str,
        config: Optional["ConfigManager"] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        """
        Initialize PostgreSQL client.

        Args:
            service_name: Name of the service using this client
            config: Optional ConfigManager for host/port resolution
            host: PostgreSQL host (defaults to env/config)
            port: PostgreSQL port (defaults to 5432)
            database: Database name
            username: Database username
            password: Database password
            min_size: Minimum pool size
            max_size: Maximum pool size
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name

        if config is None:
            config = ConfigManager(service_name)
        infra = config.get_infra_config()

        discovered_host, discovered_port = config.discover_service(
            service_name="postgres_service",
            default_host=infra.postgres_host,
            default_port=infra.postgres_port,
            env_host_key="POSTGRES_HOST",
            env_port_key="POSTGRES_PORT",
        )

        self.host = host or discovered_host
        self.port = port or discovered_port
        self.database = database or infra.postgres_db
        self.username = username or infra.postgres_user
        self.password = password or infra.postgres_password
        self.min_size = min_size or infra.postgres_pool_min
        self.max_size = max_size or infra.postgres_pool_max

        self._pool: Optional[asyncpg.Pool] = None

        logger.info(f"PostgreSQL client initialized for {service_name}: {self.host}:{self.port}/{self.database}")

    async def connect(self) -> None:
        """Create the connection pool if it does not exist yet"""
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            host=self.host,
            port=self.port,
            user=self.username,
            password=self.password,
            database=self.database,
            min_size=self.min_size,
            max_size=self.max_size,
        )
        logger.info(f"PostgreSQL pool opened for {self.service_name}")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("PostgreSQL pool not connected. Call connect() first.")
        return self._pool

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Pool stays open across blocks; close() releases it"""
        return None

    async def health_check(self) -> Optional[Dict[str, Any]]:
        """Check database health"""
        try:
            await self.connect()
            async with self.pool.acquire() as conn:
                version = await conn.fetchval("SHOW server_version")
            return {"healthy": True, "version": version}
        except Exception as e:
            logger.error(f"PostgreSQL health check failed: {e}")
            return {"healthy": False, "error": str(e)}

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return all rows"""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(sql, *(params or []))
        return [dict(row) for row in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return the first row"""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(sql, *(params or []))
        return dict(row) if row is not None else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute SQL statement, returns the command status tag"""
        async with self.pool.acquire() as conn:
            return await conn.execute(sql, *(params or []))

    async def close(self) -> None:
        """Close the pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info(f"PostgreSQL pool closed for {self.service_name}")


__all__ = ["AsyncPostgresClient"]
