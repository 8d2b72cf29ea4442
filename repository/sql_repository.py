# repository/sql_repository.py
from typing import Any, Dict, List, Mapping, Optional, Union
from sqlalchemy import TextClause, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from config.database import get_engine
from util.errors import DataAccessError
import logging

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
Statement = Union[str, TextClause]


def _stmt(sql: Statement) -> TextClause:
    return text(sql) if isinstance(sql, str) else sql


class SqlRepository:
    """
    Base for repositories over the records database.

    Every statement is a text() with bound parameters; values are never
    formatted into SQL. Driver errors surface as DataAccessError.
    """

    def __init__(self, engine: Optional[AsyncEngine] = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = get_engine()
        return self._engine

    async def _fetch_all(
        self, name: str, sql: Statement, params: Optional[Dict[str, Any]] = None
    ) -> List[Row]:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(_stmt(sql), params or {})
                return list(result.mappings().all())
        except SQLAlchemyError as e:
            logger.error("db.query.error name=%s", name, exc_info=True)
            raise DataAccessError(name) from e

    async def _fetch_one(
        self, name: str, sql: Statement, params: Optional[Dict[str, Any]] = None
    ) -> Optional[Row]:
        rows = await self._fetch_all(name, sql, params)
        return rows[0] if rows else None

    async def _execute(
        self, name: str, sql: Statement, params: Optional[Dict[str, Any]] = None
    ) -> int:
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(_stmt(sql), params or {})
                return int(result.rowcount or 0)
        except SQLAlchemyError as e:
            logger.error("db.execute.error name=%s", name, exc_info=True)
            raise DataAccessError(name) from e
