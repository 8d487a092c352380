"""
Registration Store - persistence for registration records

Handles:
- Atomic insert guarded by the unique email index
- Lookup by id / normalized email
- Filtered, stably ordered page reads
- Per-service counts and hard delete

Every call is bounded by DB_OPERATION_TIMEOUT; timeouts and connection
level failures surface as UnavailableError.
"""

import asyncio
import time
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import select, func, or_, delete
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import DuplicateEmailError, UnavailableError
from app.core.logging_config import logger
from app.models.registration import Registration
from app.utils.pagination import page_offset

T = TypeVar("T")

SEARCHABLE_COLUMNS = (
    Registration.full_name,
    Registration.email,
    Registration.phone,
    Registration.service,
    Registration.course,
)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class RegistrationStore:
    """Data access for the registrations table"""

    def __init__(self, db: AsyncSession, timeout: Optional[float] = None):
        self.db = db
        self.timeout = timeout if timeout is not None else settings.DB_OPERATION_TIMEOUT

    async def _run(self, operation: str, awaitable: Awaitable[T]) -> T:
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"[RegistrationStore] {operation} timed out after {self.timeout}s")
            await self._safe_rollback()
            raise UnavailableError(operation=operation)
        except IntegrityError:
            raise
        except (OperationalError, InterfaceError) as e:
            logger.error(f"[RegistrationStore] {operation} failed: {e}")
            await self._safe_rollback()
            raise UnavailableError(operation=operation)
        except DBAPIError as e:
            # Data and SQL errors are not transient
            if e.connection_invalidated:
                logger.error(f"[RegistrationStore] {operation} lost its connection: {e}")
                await self._safe_rollback()
                raise UnavailableError(operation=operation)
            logger.error(f"[RegistrationStore] {operation} rejected by the database: {e}")
            await self._safe_rollback()
            raise
        logger.log_db_query(operation, Registration.__tablename__, (time.perf_counter() - start) * 1000)
        return result

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except Exception as e:
            logger.warning(f"[RegistrationStore] Rollback failed: {e}")

    # ==================== WRITES ====================

    async def insert(self, values: Dict[str, Any]) -> Registration:
        """
        Insert one registration in its own transaction.

        A unique-index violation on email is rolled back and raised as
        DuplicateEmailError, the same error the pre-check produces.
        """
        registration = Registration(**values)

        async def _insert() -> Registration:
            self.db.add(registration)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise DuplicateEmailError(values.get("email", ""))
            await self.db.refresh(registration)
            return registration

        return await self._run("insert", _insert())

    async def delete(self, registration_id: str) -> bool:
        """Hard delete by id. Returns False when nothing matched."""

        async def _delete() -> bool:
            result = await self.db.execute(
                delete(Registration).where(Registration.id == registration_id)
            )
            await self.db.commit()
            return (result.rowcount or 0) > 0

        return await self._run("delete", _delete())

    # ==================== READS ====================

    async def find_by_id(self, registration_id: str) -> Optional[Registration]:
        async def _find():
            result = await self.db.execute(
                select(Registration).where(Registration.id == registration_id)
            )
            return result.scalar_one_or_none()

        return await self._run("find_by_id", _find())

    async def find_by_email(self, email: str) -> Optional[Registration]:
        """Lookup by normalized (trimmed, lower-cased) email"""
        async def _find():
            result = await self.db.execute(
                select(Registration).where(Registration.email == email.strip().lower())
            )
            return result.scalar_one_or_none()

        return await self._run("find_by_email", _find())

    def _filters(self, search: Optional[str], service: Optional[str]) -> List[Any]:
        conditions: List[Any] = []
        if search:
            pattern = f"%{escape_like(search.strip())}%"
            conditions.append(or_(*[column.ilike(pattern, escape="\\") for column in SEARCHABLE_COLUMNS]))
        if service:
            conditions.append(Registration.service == service)
        return conditions

    async def list_page(
        self,
        page: int,
        page_size: int,
        search: Optional[str] = None,
        service: Optional[str] = None,
    ) -> Tuple[Sequence[Dict[str, Any]], int]:
        """
        Fetch one page of raw rows plus the total matching count.

        Rows are plain mappings so the caller can coerce them without
        touching ORM state. Order is createdAt desc with id as tie-breaker.
        """
        conditions = self._filters(search, service)

        async def _list():
            count_stmt = select(func.count(Registration.id)).where(*conditions)
            total = (await self.db.execute(count_stmt)).scalar() or 0

            stmt = (
                select(Registration.__table__)
                .where(*conditions)
                .order_by(Registration.created_at.desc(), Registration.id.desc())
                .offset(page_offset(page, page_size))
                .limit(page_size)
            )
            rows = (await self.db.execute(stmt)).mappings().all()
            return [dict(row) for row in rows], total

        return await self._run("list_page", _list())

    async def count(self) -> int:
        async def _count() -> int:
            return (await self.db.execute(select(func.count(Registration.id)))).scalar() or 0

        return await self._run("count", _count())

    async def count_by_service(self) -> Dict[str, int]:
        async def _counts() -> Dict[str, int]:
            result = await self.db.execute(
                select(Registration.service, func.count(Registration.id))
                .group_by(Registration.service)
                .order_by(Registration.service)
            )
            return {service: count for service, count in result.all()}

        return await self._run("count_by_service", _counts())
