"""
Base Service - Common service functionality.

Services own the business rules; repositories own the SQL. Every service
gets the request's session plus a logger, and funnels unexpected errors
through `_handle_service_error` so the API only ever sees AppException.
"""

import logging
from typing import NoReturn

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.core.exceptions import AppException, ServiceError


class BaseService:
    """
    Base service class providing session access, logging and error mapping.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__module__)

    async def _handle_service_error(self, error: Exception, operation: str) -> NoReturn:
        """
        Roll back and re-raise.

        AppException subclasses pass through unchanged; anything else is
        wrapped in a ServiceError (HTTP 500).
        """
        if isinstance(error, AppException):
            raise error

        self.logger.error(f"Service error in {operation}: {error}")
        try:
            await self.db.rollback()
        except SQLAlchemyError as rollback_error:
            self.logger.error(f"Failed to rollback transaction: {rollback_error}")

        raise ServiceError(f"Failed to {operation}") from error

    def _log_operation(self, operation: str, **kwargs) -> None:
        context = " ".join(f"{k}={v}" for k, v in kwargs.items())
        self.logger.info(f"Service operation: {operation} {context}".rstrip())
