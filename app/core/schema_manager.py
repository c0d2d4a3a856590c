"""
Schema Manager.
Creates the shared master_records table, the indexes that enforce uniqueness
and the builder and agent directory tables.
"""

import logging
from typing import List

from app.config import settings
from app.core.agent_service import AgentService
from app.core.builder_service import BuilderService
from app.core.database import get_db_manager
from app.core.exceptions import DatabaseException
from app.core.master_record_query_builder import (
    MASTER_RECORDS_TABLE,
    NAME_UNIQUE_INDEX,
    CODE_UNIQUE_INDEX,
    TYPE_CODE_UNIQUE_INDEX,
)
from app.schemas.master_record import MasterStatus, MasterType

logger = logging.getLogger(__name__)


class SchemaManager:
    """Manages DDL for the master data store."""

    @staticmethod
    def _quoted_values(values: List[str]) -> str:
        return ", ".join(f"'{value}'" for value in values)

    @staticmethod
    def build_table_ddl() -> str:
        """CREATE TABLE statement for the shared master record table."""
        master_types = SchemaManager._quoted_values([t.value for t in MasterType])
        statuses = SchemaManager._quoted_values([s.value for s in MasterStatus])

        return f"""
            CREATE TABLE IF NOT EXISTS {MASTER_RECORDS_TABLE} (
                id UUID PRIMARY KEY,
                master_type VARCHAR(30) NOT NULL,
                name VARCHAR(100) NOT NULL,
                description VARCHAR(500),
                code VARCHAR(20),
                status VARCHAR(20) NOT NULL DEFAULT 'active',
                sort_order INTEGER NOT NULL DEFAULT 0,
                is_default BOOLEAN NOT NULL DEFAULT FALSE,
                is_popular BOOLEAN NOT NULL DEFAULT FALSE,
                metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                parent_id UUID REFERENCES {MASTER_RECORDS_TABLE}(id),
                parent_type VARCHAR(30),
                category VARCHAR(50),
                icon VARCHAR(50),
                color VARCHAR(10),
                numeric_value INTEGER,
                unit VARCHAR(20),
                min_value DOUBLE PRECISION,
                max_value DOUBLE PRECISION,
                state VARCHAR(100),
                country VARCHAR(100),
                longitude DOUBLE PRECISION,
                latitude DOUBLE PRECISION,
                timezone VARCHAR(50),
                pin_codes TEXT[],
                attributes JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                CONSTRAINT check_master_type CHECK (master_type IN ({master_types})),
                CONSTRAINT check_status CHECK (status IN ({statuses})),
                CONSTRAINT check_sort_order CHECK (sort_order BETWEEN 0 AND 9999),
                CONSTRAINT check_coordinates CHECK ((longitude IS NULL) = (latitude IS NULL))
            )
        """

    @staticmethod
    def build_index_ddl(code_unique_per_type: bool) -> List[str]:
        """
        Index statements. Name uniqueness is always per type; code uniqueness is either
        global (one namespace for every master type) or per type.
        """
        if code_unique_per_type:
            code_index = f"""
                CREATE UNIQUE INDEX IF NOT EXISTS {TYPE_CODE_UNIQUE_INDEX}
                ON {MASTER_RECORDS_TABLE} (master_type, code)
                WHERE code IS NOT NULL AND status <> 'archived'
            """
            stale_code_index = CODE_UNIQUE_INDEX
        else:
            code_index = f"""
                CREATE UNIQUE INDEX IF NOT EXISTS {CODE_UNIQUE_INDEX}
                ON {MASTER_RECORDS_TABLE} (code)
                WHERE code IS NOT NULL AND status <> 'archived'
            """
            stale_code_index = TYPE_CODE_UNIQUE_INDEX

        return [
            f"""
                CREATE UNIQUE INDEX IF NOT EXISTS {NAME_UNIQUE_INDEX}
                ON {MASTER_RECORDS_TABLE} (master_type, name)
                WHERE status <> 'archived'
            """,
            f"DROP INDEX IF EXISTS {stale_code_index}",
            code_index,
            f"""
                CREATE INDEX IF NOT EXISTS idx_master_records_type_status
                ON {MASTER_RECORDS_TABLE} (master_type, status, sort_order)
            """,
            f"""
                CREATE INDEX IF NOT EXISTS idx_master_records_parent
                ON {MASTER_RECORDS_TABLE} (parent_id)
            """,
            f"""
                CREATE INDEX IF NOT EXISTS idx_master_records_category
                ON {MASTER_RECORDS_TABLE} (master_type, category)
            """,
            f"""
                CREATE INDEX IF NOT EXISTS idx_master_records_numeric
                ON {MASTER_RECORDS_TABLE} (master_type, numeric_value)
            """,
        ]

    @staticmethod
    def initialize_master_records_schema() -> bool:
        """
        Create the master_records table and its indexes if they do not exist.

        Returns:
            True when the schema is in place
        """
        db_manager = get_db_manager()

        try:
            with db_manager.get_connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(SchemaManager.build_table_ddl())
                    for statement in SchemaManager.build_index_ddl(settings.CODE_UNIQUE_PER_TYPE):
                        cursor.execute(statement)
                finally:
                    cursor.close()

            logger.info(
                f"Master records schema ready (code unique per type: {settings.CODE_UNIQUE_PER_TYPE})"
            )
            return True

        except DatabaseException:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize master records schema: {str(e)}")
            raise DatabaseException(f"Schema initialization failed: {str(e)}")

    @staticmethod
    def initialize_directory_schema() -> bool:
        """Create the builders and agents tables if they do not exist."""
        db_manager = get_db_manager()

        try:
            with db_manager.get_connection() as conn:
                cursor = conn.cursor()
                try:
                    for service in (BuilderService(), AgentService()):
                        for statement in service.table_ddl():
                            cursor.execute(statement)
                finally:
                    cursor.close()

            logger.info("Directory schema ready (builders, agents)")
            return True

        except DatabaseException:
            raise
        except Exception as e:
            logger.error(f"Failed to initialize directory schema: {str(e)}")
            raise DatabaseException(f"Schema initialization failed: {str(e)}")
