"""
Shared exits for locked registration operations.

Both helpers end the transaction, which releases the event lock. A rejection
has written nothing, so it commits: unlike a rollback, that leaves the
caller's loaded instances usable. A store failure must roll back, and since
a rollback expires every loaded instance its result carries no record.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventgate.schemas.registration import RegistrationError, RegistrationResult
from eventgate.core.metrics import record_outcome, record_store_failure
from eventgate.core.logging import get_logger

logger = get_logger(__name__)


async def reject(
    db: AsyncSession,
    operation: str,
    reason: RegistrationError,
    message: str,
    registration=None,
    **context,
) -> RegistrationResult:
    result = RegistrationResult.rejected(reason, message, registration=registration)
    await db.commit()
    logger.info(f"{operation}_rejected", reason=reason.value, **context)
    record_outcome(operation, reason.value)
    return result


async def store_failure(
    db: AsyncSession,
    operation: str,
    message: str,
    exc: SQLAlchemyError,
    **context,
) -> RegistrationResult:
    await db.rollback()
    logger.error(f"{operation}_store_failure", error=str(exc), **context)
    record_store_failure(operation)
    record_outcome(operation, RegistrationError.STORE_FAILURE.value)
    return RegistrationResult.rejected(RegistrationError.STORE_FAILURE, message, error=str(exc))
