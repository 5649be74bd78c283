import asyncio
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Tables mirror the storefront's Postgres schema. Rows are plain dicts keyed by id.
TABLES = (
    "products",
    "partner_profiles",
    "partner_products",
    "orders",
    "order_items",
    "wallet_transactions",
    "wallet_balances",
    "users",
    "customer_payment_methods",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class Database:
    """
    In-process table store handed to every service.

    The host application owns its lifecycle (connect on startup, close on
    shutdown). Reads return copies so callers can't mutate stored rows behind
    the store's back.
    """

    def __init__(self):
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in TABLES}
        self._locks: Dict[str, asyncio.Lock] = {}
        self.connected = False

    async def connect(self) -> None:
        self.connected = True
        logger.info("Database connected (%d tables)", len(self._tables))

    async def close(self) -> None:
        self.reset()
        self.connected = False
        logger.info("Database closed")

    def reset(self) -> None:
        for rows in self._tables.values():
            rows.clear()
        self._locks.clear()

    def lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def _rows(self, table: str) -> Dict[str, Dict[str, Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise KeyError(f"unknown table: {table}")

    # ---------------------------
    # Row access
    # ---------------------------
    def insert(self, table: str, row: Dict[str, Any], key: str = "id") -> Dict[str, Any]:
        rows = self._rows(table)
        data = copy.deepcopy(row)
        if key == "id":
            data.setdefault("id", new_id())
        if data[key] in rows:
            raise ValueError(f"duplicate key {key}={data[key]} in {table}")
        now = utcnow()
        data.setdefault("created_at", now)
        data.setdefault("updated_at", now)
        rows[data[key]] = data
        return copy.deepcopy(data)

    def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        row = self._rows(table).get(row_id)
        return copy.deepcopy(row) if row is not None else None

    def select(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        out = []
        for row in self._rows(table).values():
            if all(row.get(k) == v for k, v in filters.items()):
                out.append(copy.deepcopy(row))
        return out

    def update(self, table: str, row_id: str, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = self._rows(table).get(row_id)
        if row is None:
            return None
        row.update(copy.deepcopy(values))
        row["updated_at"] = utcnow()
        return copy.deepcopy(row)

    def update_where(self, table: str, match: Dict[str, Any], values: Dict[str, Any]) -> int:
        """
        Conditional update: UPDATE table SET values WHERE match. Returns the
        number of affected rows. Runs without yielding to the event loop, so the
        check and the set can't interleave with another coroutine.
        """
        affected = 0
        now = utcnow()
        for row in self._rows(table).values():
            if all(row.get(k) == v for k, v in match.items()):
                row.update(copy.deepcopy(values))
                row["updated_at"] = now
                affected += 1
        return affected

    def count(self, table: str) -> int:
        return len(self._rows(table))
