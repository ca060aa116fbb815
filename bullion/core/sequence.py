"""
Sequential human-readable identifiers (DRF001, TXN042, FTR1000).

The scan for the current maximum only picks a good first candidate. The
unique constraint on the column is what actually prevents duplicates: every
insert runs in its own SAVEPOINT and a collision on the sequence column is
retried with a number above the one that collided.
"""

import logging
import re
from typing import Callable, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from bullion.core.config import config
from bullion.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SequenceGenerator:
    """
    Prefix + zero-padded counter stored in a unique string column.

    Args:
        column: mapped attribute holding the identifier (must be unique)
        prefix: fixed 3-letter prefix
        width: zero padding of the numeric part
        max_retries: write attempts before giving up with ConflictError
        scan_limit: candidates probed by the existence check per call
    """

    def __init__(
        self,
        column: InstrumentedAttribute,
        prefix: str,
        width: Optional[int] = None,
        max_retries: Optional[int] = None,
        scan_limit: Optional[int] = None,
    ):
        self.column = column
        self.prefix = prefix.upper()
        self.width = width or config.sequence_pad_width
        self.max_retries = max_retries or config.sequence_max_retries
        self.scan_limit = scan_limit or config.sequence_scan_limit
        self.pattern = re.compile(rf"^{re.escape(self.prefix)}(\d+)$")

    def format(self, number: int) -> str:
        return f"{self.prefix}{number:0{self.width}d}"

    def parse(self, value: Optional[str]) -> Optional[int]:
        if not value:
            return None
        match = self.pattern.match(value)
        return int(match.group(1)) if match else None

    async def _scan_max(self, db: AsyncSession) -> int:
        # Longest string first, then lexical: numeric order for same-prefix values
        query = (
            select(self.column)
            .where(self.column.like(f"{self.prefix}%"))
            .order_by(func.length(self.column).desc(), self.column.desc())
            .limit(self.scan_limit)
        )
        result = await db.execute(query)
        for value in result.scalars():
            number = self.parse(value)
            if number is not None:
                return number
        return 0

    async def _exists(self, db: AsyncSession, value: str) -> bool:
        result = await db.execute(
            select(self.column).where(self.column == value).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def next_value(self, db: AsyncSession, after: int = 0) -> str:
        """
        Next free identifier strictly above both the stored maximum and `after`.

        Raises:
            ConflictError: every probed candidate was already taken
        """
        number = max(await self._scan_max(db), after) + 1

        for _ in range(self.scan_limit):
            candidate = self.format(number)
            if not await self._exists(db, candidate):
                return candidate
            logger.warning("%s already taken, probing next", candidate)
            number += 1

        raise ConflictError(
            f"Unable to find a free {self.prefix} identifier after {self.scan_limit} probes"
        )

    def _is_collision(self, exc: IntegrityError) -> bool:
        return self.column.key in str(exc.orig)

    async def insert_with_retry(
        self,
        db: AsyncSession,
        build: Callable[[str], T],
        preset: Optional[str] = None,
    ) -> T:
        """
        Build and flush a row carrying a fresh identifier.

        Args:
            db: session inside an open unit of work
            build: factory receiving the identifier and returning the ORM object
            preset: identifier to try first (caller supplied); later attempts
                always generate

        Returns:
            The flushed object

        Raises:
            ConflictError: the identifier kept colliding for max_retries attempts
        """
        # Pending work belongs to the outer unit of work, not to the savepoint
        await db.flush()

        after = 0
        value = preset

        for attempt in range(1, self.max_retries + 1):
            if value is None:
                value = await self.next_value(db, after)

            entity = build(value)
            try:
                async with db.begin_nested():
                    db.add(entity)
                    await db.flush()
            except IntegrityError as exc:
                if not self._is_collision(exc):
                    raise
                logger.warning(
                    "Identifier %s collided on write (attempt %d/%d)",
                    value,
                    attempt,
                    self.max_retries,
                )
                after = max(after, self.parse(value) or 0)
                value = None
                continue

            return entity

        raise ConflictError(
            f"Unable to allocate a unique {self.prefix} identifier after "
            f"{self.max_retries} attempts. Please try again."
        )
