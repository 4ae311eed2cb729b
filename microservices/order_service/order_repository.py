"""
Order Repository

Data access layer for orders using the asyncpg-backed PostgresClientWrapper.

Returns raw joined rows; OrderAggregator turns them into Order aggregates.
Column aliases match the keys documented in order_aggregator.
"""

from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime, timedelta, timezone
import logging
import uuid

import asyncpg

from core.postgres_client import PostgresClientWrapper
from .models import Order, OrderFilter
from .protocols import PersistenceError

logger = logging.getLogger(__name__)

DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

JOINED_COLUMNS = """
    o.id AS order_id,
    o.userid AS user_id,
    o.type AS order_type,
    o.orderstatus::text AS order_status,
    o.payment_status,
    COALESCE(o.currency, p.currency) AS currency,
    o.createdat AS created_at,
    o.updatedat AS updated_at,
    o.custodyserviceid AS custody_service_id,
    oi.id AS item_id,
    oi.productid AS product_id,
    oi.productname AS product_name,
    oi.quantity::text AS quantity,
    oi.unitprice::text AS unit_price,
    oi.totalprice::text AS total_price,
    cs.custodyservicename AS custody_service_name,
    cs.fee::text AS custody_service_fee,
    cs.paymentfrequency AS custody_service_payment_frequency,
    curr.isocode3 AS custody_service_currency,
    cust.id AS custodian_id,
    cust.custodianname AS custodian_name
"""

JOINED_TABLES = """
    LEFT JOIN order_items oi ON o.id = oi.orderid
    LEFT JOIN product p ON oi.productid = p.id
    LEFT JOIN custodyservice cs ON o.custodyserviceid = cs.id
    LEFT JOIN custodian cust ON cs.custodianid = cust.id
    LEFT JOIN currency curr ON cs.currencyid = curr.id
"""


def _to_db_timestamp(value: datetime) -> datetime:
    """Columns are TIMESTAMP WITHOUT TIME ZONE holding UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
        return True
    except ValueError:
        return False


class OrderRepository:
    """
    Repository for order data operations

    Handles all database operations for orders and their items.
    """

    def __init__(self, db: PostgresClientWrapper):
        """Initialize Order Repository with a PostgreSQL client"""
        self.db = db
        self.orders_table = "orders"
        self.items_table = "order_items"

        logger.info("OrderRepository initialized with PostgresClient")

    async def save(self, order: Order, actor_id: Optional[str] = None) -> None:
        """
        Insert order header and items in a single transaction.

        Items get strictly increasing createdat values so that reads return
        them in insertion order.
        """
        created_at = _to_db_timestamp(order.created_at)
        updated_at = _to_db_timestamp(order.updated_at)

        item_rows = [
            (
                item.id,
                order.id,
                item.product_id,
                item.product_name,
                item.quantity,
                item.unit_price,
                item.total_price,
                created_at + timedelta(microseconds=position),
                actor_id,
            )
            for position, item in enumerate(order.items)
        ]

        try:
            async with self.db.transaction() as conn:
                await conn.execute(
                    f'''
                    INSERT INTO {self.orders_table} (
                        id, userid, type, orderstatus, custodyserviceid,
                        payment_status, currency, createdat, updatedat, createdby, updatedby
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $10)
                    ''',
                    order.id,
                    order.user_id,
                    order.type.value,
                    order.status.value,
                    order.custody_service_id,
                    order.payment_status,
                    order.currency,
                    created_at,
                    updated_at,
                    actor_id,
                )
                if item_rows:
                    await conn.executemany(
                        f'''
                        INSERT INTO {self.items_table} (
                            id, orderid, productid, productname, quantity,
                            unitprice, totalprice, createdat, createdby
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                        ''',
                        item_rows,
                    )
        except DB_ERRORS as e:
            logger.error(f"Failed to save order {order.id}: {e}")
            raise PersistenceError(f"Failed to create order: {e}") from e

        logger.debug(f"Saved order {order.id} with {len(item_rows)} items")

    async def find_joined_rows_by_id(self, order_id: str) -> List[Dict[str, Any]]:
        """Joined rows for one order, items in creation order"""
        if not _is_uuid(order_id):
            return []

        query = f'''
            SELECT {JOINED_COLUMNS}
            FROM {self.orders_table} o
            {JOINED_TABLES}
            WHERE o.id = $1
            ORDER BY oi.createdat ASC
        '''
        try:
            return await self.db.query(query, [order_id])
        except DB_ERRORS as e:
            logger.error(f"Failed to fetch order {order_id}: {e}")
            raise PersistenceError(f"Failed to fetch order: {e}") from e

    async def find_joined_rows_by_filter(
        self,
        order_filter: OrderFilter,
        limit: int,
        offset: int
    ) -> List[Dict[str, Any]]:
        """
        Joined rows for one page of orders.

        LIMIT/OFFSET apply to distinct orders (not joined rows); rows are
        ordered by order creation time descending, then item creation time.
        """
        where_clause, params = self._build_where(order_filter)
        limit_param = len(params) + 1
        params.extend([limit, offset])

        query = f'''
            WITH page AS (
                SELECT o.id, o.createdat
                FROM {self.orders_table} o
                {where_clause}
                ORDER BY o.createdat DESC, o.id
                LIMIT ${limit_param} OFFSET ${limit_param + 1}
            )
            SELECT {JOINED_COLUMNS}
            FROM page
            JOIN {self.orders_table} o ON o.id = page.id
            {JOINED_TABLES}
            ORDER BY page.createdat DESC, page.id, oi.createdat ASC
        '''
        try:
            return await self.db.query(query, params)
        except DB_ERRORS as e:
            logger.error(f"Failed to list orders: {e}")
            raise PersistenceError(f"Failed to list orders: {e}") from e

    async def count_by_filter(self, order_filter: OrderFilter) -> int:
        """Count distinct orders matching the filter"""
        where_clause, params = self._build_where(order_filter)
        query = f'SELECT COUNT(*) FROM {self.orders_table} o {where_clause}'
        try:
            total = await self.db.query_value(query, params)
        except DB_ERRORS as e:
            logger.error(f"Failed to count orders: {e}")
            raise PersistenceError(f"Failed to count orders: {e}") from e
        return int(total or 0)

    async def update_status(
        self,
        order_id: str,
        expected_status: str,
        new_status: str,
        actor_id: Optional[str] = None
    ) -> bool:
        """
        Compare-and-swap status update.

        Returns:
            True if the row still had expected_status and was updated
        """
        query = f'''
            UPDATE {self.orders_table}
            SET orderstatus = $1, updatedat = $2, updatedby = $3
            WHERE id = $4 AND orderstatus = $5
        '''
        now = _to_db_timestamp(datetime.now(timezone.utc))
        try:
            count = await self.db.execute(
                query, [new_status, now, actor_id, order_id, expected_status]
            )
        except DB_ERRORS as e:
            logger.error(f"Failed to update order status {order_id}: {e}")
            raise PersistenceError(f"Failed to update order status: {e}") from e
        return count == 1

    async def health_check(self) -> bool:
        return await self.db.health_check()

    def _build_where(self, order_filter: OrderFilter) -> Tuple[str, List[Any]]:
        conditions = []
        params: List[Any] = []
        param_count = 0

        if order_filter.user_id:
            param_count += 1
            conditions.append(f"o.userid = ${param_count}")
            params.append(order_filter.user_id)

        if order_filter.status:
            param_count += 1
            conditions.append(f"o.orderstatus = ${param_count}")
            params.append(order_filter.status.value)

        if order_filter.type:
            param_count += 1
            conditions.append(f"o.type = ${param_count}")
            params.append(order_filter.type.value)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        return where_clause, params
