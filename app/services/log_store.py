"""
Visitor Log Store

This service persists visitor records and serves the admin log query.

Design Decisions:
- Each operation opens its own short-lived session from the session factory,
  the same way background tasks do, so no request-scoped session is needed
- Writes are best-effort: any failure is logged with the request's domain,
  path and trace id, counted in `write_failures`, and reported as False.
  The caller's response never depends on the outcome
- Reads raise DatabaseError; the HTTP layer turns it into a JSON error body
- Nothing is retried
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import DatabaseError
from app.core.validators import parse_pagination_param
from app.db.models import Visitor
from app.services.classifier import VisitorRecord

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0


@dataclass(frozen=True)
class LogQuery:
    """Filter and pagination for the admin log query."""
    domain: Optional[str] = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET

    @classmethod
    def from_query_params(
        cls,
        params: Mapping[str, str],
        default_limit: int = DEFAULT_LIMIT,
        max_limit: Optional[int] = None
    ) -> "LogQuery":
        """
        Build a query from URL query parameters.

        Malformed or negative limit/offset values fall back to the defaults;
        an empty domain means no filter.
        """
        return cls(
            domain=params.get("domain") or None,
            limit=parse_pagination_param(params.get("limit"), default_limit, max_limit),
            offset=parse_pagination_param(params.get("offset"), DEFAULT_OFFSET),
        )


@dataclass
class LogQueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.rows)


class VisitorLogStore:
    """
    Log store adapter for the `visitors` table.

    Attributes:
        write_failures: Number of writes that failed since the store was created
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        """
        Initialize the store with a session factory.

        Args:
            session_maker: Factory producing async database sessions
        """
        self._session_maker = session_maker
        self.write_failures = 0

    async def write(self, record: VisitorRecord) -> bool:
        """
        Insert one row for a visitor record.

        Args:
            record: The classified request

        Returns:
            True if the row was committed, False if the write failed
        """
        try:
            async with self._session_maker() as session:
                session.add(Visitor.from_record(record))
                await session.commit()
        except Exception as e:
            self.write_failures += 1
            logger.error(
                f"Failed to log visitor for {record.domain}{record.path}: {str(e)}",
                exc_info=True,
                extra={
                    "domain": record.domain,
                    "path": record.path,
                    "cloudflare_ray": record.cloudflare_ray,
                    "write_failures": self.write_failures,
                }
            )
            return False
        return True

    async def read(self, query: LogQuery) -> LogQueryResult:
        """
        Fetch a page of visitor rows, newest first.

        Args:
            query: Domain filter and pagination

        Returns:
            LogQueryResult with rows as column -> value dictionaries

        Raises:
            DatabaseError: If the query fails
        """
        statement = select(Visitor)
        if query.domain:
            statement = statement.where(Visitor.domain == query.domain)
        statement = (
            statement
            .order_by(Visitor.timestamp.desc())
            .limit(query.limit)
            .offset(query.offset)
        )

        try:
            async with self._session_maker() as session:
                result = await session.exec(statement)
                visitors = result.all()
        except Exception as e:
            raise DatabaseError(str(e), original_error=e) from e

        return LogQueryResult(rows=[visitor.model_dump() for visitor in visitors])
