"""
Base service layer: contract-driven SQL over the shared connection pool
"""

import logging
from typing import Any, Dict, List, Tuple

import asyncpg

from rpc.contracts.registry import get_all_contracts
from rpc.errors import ConstraintViolation, StoreConnectionError, ValidationError
from database.connection import acquire

logger = logging.getLogger(__name__)

# Server-side SQLSTATE class 22 errors, plus the client-side encoding error
# asyncpg raises for an argument it cannot send (a ValueError subclass)
DATA_ERRORS = (asyncpg.DataError, ValueError)

UNAVAILABLE_MESSAGE = "Database is unavailable"


class BaseService:
    """Executes single-statement reads, inserts and deletes for one resource"""

    def __init__(self, resource_name: str, pool=None):
        contracts = get_all_contracts()
        if resource_name not in contracts:
            raise ValueError(f"Resource not found in contracts: {resource_name}")

        self.resource_name = resource_name
        self.contract = contracts[resource_name]
        # None means the process-wide pool from database.connection
        self._pool = pool
        logger.info(f"BaseService initialized for resource: {resource_name}")

    async def read_all(self) -> List[Dict[str, Any]]:
        """Read every row of the resource in contract order"""
        query, params = self._build_read_query()
        async with acquire(self._pool) as conn:
            logger.info(f"Executing READ query: {query}")
            try:
                rows = await conn.fetch(query, *params)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error during READ: {e}")
                raise StoreConnectionError(UNAVAILABLE_MESSAGE) from e
        return [dict(row) for row in rows]

    async def create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored"""
        query, params = self._build_insert_query(values)
        async with acquire(self._pool) as conn:
            logger.info(f"Executing INSERT: {query}")
            try:
                row = await conn.fetchrow(query, *params)
            except asyncpg.UniqueViolationError as e:
                logger.warning(f"Unique constraint violation on {self.resource_name}: {e}")
                raise ConstraintViolation(
                    self._conflict_message(e),
                    {"constraint": getattr(e, "constraint_name", None)}
                ) from e
            except DATA_ERRORS as e:
                raise self._data_error(e) from e
            except asyncpg.PostgresError as e:
                logger.error(f"Database error during INSERT: {e}")
                raise StoreConnectionError(UNAVAILABLE_MESSAGE) from e

        if not row:
            raise StoreConnectionError("Insert operation failed - no data returned")
        return dict(row)

    async def delete(self, record_id: Any) -> int:
        """Delete by primary key. Returns the number of rows removed (0 or 1)."""
        query, params = self._build_delete_query(record_id)
        async with acquire(self._pool) as conn:
            logger.info(f"Executing DELETE: {query}")
            logger.info(f"Parameters: {params}")
            try:
                result = await conn.execute(query, *params)
            except DATA_ERRORS as e:
                raise self._data_error(e) from e
            except asyncpg.PostgresError as e:
                logger.error(f"Database error during DELETE: {e}")
                raise StoreConnectionError(UNAVAILABLE_MESSAGE) from e

        # asyncpg returns "DELETE N" where N is the number of rows
        return int(result.split()[-1]) if result else 0

    def _select_list(self) -> str:
        return ", ".join(f.name for f in self.contract.readable_fields())

    def _build_read_query(self) -> Tuple[str, List[Any]]:
        """Build SQL SELECT from the contract"""
        query = f"SELECT {self._select_list()} FROM {self.contract.table}"
        if self.contract.order_by:
            direction = self.contract.order_dir.upper()
            order_parts = [f"{field} {direction}" for field in self.contract.order_by]
            query += f" ORDER BY {', '.join(order_parts)}"
        return query, []

    def _build_insert_query(self, values: Dict[str, Any]) -> Tuple[str, List[Any]]:
        """Build SQL INSERT ... RETURNING from writable values"""
        field_names = []
        params = []
        for name, value in values.items():
            if not self.contract.is_field_writable(name):
                raise ValueError(f"Field not writable: {name}")
            field_names.append(name)
            params.append(value)

        placeholders = ", ".join(f"${i}" for i in range(1, len(params) + 1))
        query = (
            f"INSERT INTO {self.contract.table} ({', '.join(field_names)}) "
            f"VALUES ({placeholders}) RETURNING {self._select_list()}"
        )
        return query, params

    def _build_delete_query(self, record_id: Any) -> Tuple[str, List[Any]]:
        """Build SQL DELETE by primary key"""
        pk = self.contract.primary_key()
        if pk is None:
            raise ValueError(f"Cannot identify primary key field for {self.resource_name}")
        return f"DELETE FROM {self.contract.table} WHERE {pk.name} = $1", [record_id]

    def _conflict_message(self, error: Exception) -> str:
        for field in self.contract.fields:
            if field.unique and field.name in str(error):
                return f"A record with this {field.name} already exists"
        return "Record already exists"

    def _data_error(self, error: Exception) -> ValidationError:
        """The store refused a value as malformed; the input is at fault, not the connection"""
        logger.warning(f"Data error on {self.resource_name}: {error}")
        return ValidationError(
            "Input contains a value the database cannot store",
            [{"field": "input", "message": "Value cannot be stored", "code": "invalid_value"}]
        )
