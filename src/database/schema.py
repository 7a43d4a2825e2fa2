"""
Physical table layout derived from resource contracts
"""

import logging
from typing import List

from rpc.contracts.base import ContractField, FieldType, ResourceContract
from database.connection import acquire

logger = logging.getLogger(__name__)

SQL_TYPES = {
    FieldType.INTEGER: "INTEGER",
    FieldType.STRING: "VARCHAR(255)",
    FieldType.TEXT: "TEXT",
    FieldType.BOOLEAN: "BOOLEAN",
    FieldType.TIMESTAMP: "TIMESTAMPTZ",
}


def _column_sql(field: ContractField) -> str:
    if field.primary_key and field.type == FieldType.INTEGER:
        return f"{field.name} SERIAL PRIMARY KEY"

    parts = [field.name, SQL_TYPES[field.type]]
    if field.primary_key:
        parts.append("PRIMARY KEY")
    if not field.nullable and not field.primary_key:
        parts.append("NOT NULL")
    if field.unique:
        parts.append("UNIQUE")
    if field.type == FieldType.TIMESTAMP and not field.writable:
        parts.append("DEFAULT NOW()")
    return " ".join(parts)


def build_create_table_sql(contract: ResourceContract) -> str:
    """Build CREATE TABLE IF NOT EXISTS for a contract"""
    columns: List[str] = [_column_sql(f) for f in contract.fields]
    body = ",\n    ".join(columns)
    return f"CREATE TABLE IF NOT EXISTS {contract.table} (\n    {body}\n)"


async def ensure_schema(contracts: List[ResourceContract]):
    """Create missing tables. Existing tables are left untouched."""
    async with acquire() as conn:
        for contract in contracts:
            ddl = build_create_table_sql(contract)
            logger.info(f"Ensuring table {contract.table}")
            await conn.execute(ddl)
