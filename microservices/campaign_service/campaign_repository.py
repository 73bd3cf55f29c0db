"""
Campaign Service Data Repository

Data access layer - PostgreSQL (Async, asyncpg)

Every mutation is a single statement, so row-level locks serialize
concurrent writers and the bulk completion never overwrites a concurrent
field update (it only writes status and updated_at).
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.config_manager import ConfigManager
from core.postgres_client import AsyncPostgresClient

from .models import Campaign, CampaignCategory, CampaignPatch, CampaignStatus, as_utc, utc_now
from .protocols import CampaignRepositoryError, CampaignValidationError

logger = logging.getLogger(__name__)


class CampaignRepository:
    """Campaign service data repository - PostgreSQL (Async)"""

    # Columns a patch may write; status is owned by the completion job
    UPDATABLE_COLUMNS = ("title", "description", "category", "target_amount", "min_donation", "deadline")

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        db: Optional[AsyncPostgresClient] = None,
    ):
        if config is None:
            config = ConfigManager("campaign_service")

        self.db = db or AsyncPostgresClient(service_name="campaign_service", config=config)
        self.schema = "campaign"
        self.campaigns_table = "campaigns"

    @property
    def _table(self) -> str:
        return f"{self.schema}.{self.campaigns_table}"

    async def initialize(self):
        """Open the pool and create the schema if missing"""
        ddl = f'''
            CREATE SCHEMA IF NOT EXISTS {self.schema};

            CREATE TABLE IF NOT EXISTS {self._table} (
                campaign_id TEXT PRIMARY KEY,
                owner_id BIGINT NOT NULL,
                title VARCHAR(100) NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                category TEXT NOT NULL DEFAULT 'other',
                target_amount NUMERIC(14, 2) NOT NULL,
                collected_amount NUMERIC(14, 2) NOT NULL DEFAULT 0,
                min_donation NUMERIC(14, 2) NOT NULL,
                deadline TIMESTAMPTZ NOT NULL,
                status TEXT NOT NULL DEFAULT 'active',
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            );

            CREATE INDEX IF NOT EXISTS idx_campaigns_owner
                ON {self._table} (owner_id);
            CREATE INDEX IF NOT EXISTS idx_campaigns_active_deadline
                ON {self._table} (deadline) WHERE status = 'active';
        '''
        try:
            async with self.db:
                await self.db.execute(ddl)
        except Exception as e:
            logger.error(f"Error initializing campaign schema: {e}", exc_info=True)
            raise CampaignRepositoryError(f"Cannot initialize campaign storage: {e}") from e

        logger.info("Campaign repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Campaign repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        result = await self.db.health_check()
        return bool(result and result.get("healthy"))

    # ====================
    # Campaign CRUD
    # ====================

    async def create_campaign(self, campaign: Campaign) -> Campaign:
        """Insert a campaign, timestamps assigned here"""
        try:
            now = utc_now()
            query = f'''
                INSERT INTO {self._table} (
                    campaign_id, owner_id, title, description, category,
                    target_amount, collected_amount, min_donation, deadline,
                    status, created_at, updated_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $11)
                RETURNING *
            '''
            params = [
                campaign.campaign_id,
                campaign.owner_id,
                campaign.title,
                campaign.description,
                campaign.category.value,
                campaign.target_amount,
                campaign.collected_amount,
                campaign.min_donation,
                as_utc(campaign.deadline),
                campaign.status.value,
                now,
            ]

            async with self.db:
                result = await self.db.query_row(query, params=params)

            if not result:
                raise CampaignRepositoryError(f"Insert of campaign {campaign.campaign_id} returned no row")
            return self._row_to_campaign(result)

        except CampaignRepositoryError:
            raise
        except Exception as e:
            logger.error(f"Error creating campaign: {e}", exc_info=True)
            raise CampaignRepositoryError(f"Cannot create campaign: {e}") from e

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        try:
            query = f'''
                SELECT * FROM {self._table}
                WHERE campaign_id = $1
            '''

            async with self.db:
                result = await self.db.query_row(query, params=[campaign_id])

            return self._row_to_campaign(result) if result else None

        except Exception as e:
            logger.error(f"Error getting campaign {campaign_id}: {e}")
            raise CampaignRepositoryError(f"Cannot load campaign {campaign_id}: {e}") from e

    async def list_campaigns_by_owner(self, owner_id: int) -> List[Campaign]:
        """List an owner's campaigns, newest first"""
        try:
            query = f'''
                SELECT * FROM {self._table}
                WHERE owner_id = $1
                ORDER BY created_at DESC
            '''

            async with self.db:
                results = await self.db.query(query, params=[owner_id])

            return [self._row_to_campaign(row) for row in results]

        except Exception as e:
            logger.error(f"Error listing campaigns for owner {owner_id}: {e}")
            raise CampaignRepositoryError(f"Cannot list campaigns for owner {owner_id}: {e}") from e

    async def update_campaign(
        self, campaign_id: str, owner_id: int, patch: CampaignPatch
    ) -> Optional[Campaign]:
        """
        Apply provided patch fields to the (campaign_id, owner_id) row

        When the patch carries min_donation or target_amount, the statement
        only matches if the merged terms keep min_donation <= target_amount,
        so concurrent updates are checked against the row they lock.

        Raises:
            CampaignValidationError: the row exists but the merged terms are invalid
        """
        try:
            set_clauses = []
            params: List[Any] = []
            provided = patch.provided_fields()
            min_expr = "min_donation"
            target_expr = "target_amount"

            for column in self.UPDATABLE_COLUMNS:
                if column not in provided:
                    continue
                value = provided[column]
                if isinstance(value, CampaignCategory):
                    value = value.value
                elif isinstance(value, datetime):
                    value = as_utc(value)
                params.append(value)
                set_clauses.append(f"{column} = ${len(params)}")
                if column == "min_donation":
                    min_expr = f"${len(params)}::numeric"
                elif column == "target_amount":
                    target_expr = f"${len(params)}::numeric"

            params.append(utc_now())
            set_clauses.append(f"updated_at = ${len(params)}")

            params.append(campaign_id)
            id_param = len(params)
            params.append(owner_id)
            owner_param = len(params)

            terms_guard = ""
            if "min_donation" in provided or "target_amount" in provided:
                terms_guard = f" AND {min_expr} <= {target_expr}"

            query = f'''
                UPDATE {self._table}
                SET {", ".join(set_clauses)}
                WHERE campaign_id = ${id_param} AND owner_id = ${owner_param}{terms_guard}
                RETURNING *
            '''

            async with self.db:
                result = await self.db.query_row(query, params=params)

            if result:
                return self._row_to_campaign(result)

            if terms_guard and await self._owned_row_exists(campaign_id, owner_id):
                raise CampaignValidationError(
                    "Minimum donation cannot exceed target amount", field="min_donation"
                )
            return None

        except CampaignValidationError:
            raise
        except Exception as e:
            logger.error(f"Error updating campaign {campaign_id}: {e}")
            raise CampaignRepositoryError(f"Cannot update campaign {campaign_id}: {e}") from e

    async def delete_campaign(
        self, campaign_id: str, owner_id: Optional[int] = None
    ) -> Optional[int]:
        """Delete campaign, returns the former owner"""
        try:
            if owner_id is None:
                query = f'''
                    DELETE FROM {self._table}
                    WHERE campaign_id = $1
                    RETURNING owner_id
                '''
                params = [campaign_id]
            else:
                query = f'''
                    DELETE FROM {self._table}
                    WHERE campaign_id = $1 AND owner_id = $2
                    RETURNING owner_id
                '''
                params = [campaign_id, owner_id]

            async with self.db:
                result = await self.db.query_row(query, params=params)

            return result["owner_id"] if result else None

        except Exception as e:
            logger.error(f"Error deleting campaign {campaign_id}: {e}")
            raise CampaignRepositoryError(f"Cannot delete campaign {campaign_id}: {e}") from e

    # ====================
    # Scheduled completion
    # ====================

    async def complete_expired_campaigns(self, now: Optional[datetime] = None) -> List[Campaign]:
        """Flip active campaigns past their deadline to completed in one statement"""
        try:
            now = as_utc(now) or utc_now()
            query = f'''
                UPDATE {self._table}
                SET status = $1, updated_at = $3
                WHERE status = $2 AND deadline < $3
                RETURNING *
            '''
            params = [CampaignStatus.COMPLETED.value, CampaignStatus.ACTIVE.value, now]

            async with self.db:
                results = await self.db.query(query, params=params)

            return [self._row_to_campaign(row) for row in results]

        except Exception as e:
            logger.error(f"Error completing expired campaigns: {e}")
            raise CampaignRepositoryError(f"Cannot complete expired campaigns: {e}") from e

    async def _owned_row_exists(self, campaign_id: str, owner_id: int) -> bool:
        query = f'''
            SELECT 1 AS found FROM {self._table}
            WHERE campaign_id = $1 AND owner_id = $2
        '''
        async with self.db:
            row = await self.db.query_row(query, params=[campaign_id, owner_id])
        return row is not None

    def _row_to_campaign(self, row: Dict[str, Any]) -> Campaign:
        """Convert database row to Campaign model"""
        return Campaign(
            campaign_id=row["campaign_id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row.get("description") or "",
            category=CampaignCategory(row.get("category") or CampaignCategory.OTHER.value),
            target_amount=row["target_amount"],
            collected_amount=row.get("collected_amount") or 0,
            min_donation=row["min_donation"],
            deadline=as_utc(row.get("deadline")),
            status=CampaignStatus(row["status"]),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


__all__ = ["CampaignRepository"]
