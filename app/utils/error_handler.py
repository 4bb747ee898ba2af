"""
Error taxonomy and HTTP error rendering for the order API
"""

import uuid
import logging
from typing import Optional, Any
from datetime import datetime
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

class OrderValidationError(Exception):
    """Request is well-formed JSON but violates an order rule"""
    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", details: Optional[Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class StoreError(Exception):
    """The database rejected a read or write"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

class NotificationError(Exception):
    """Outbound notification could not be delivered"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

class ErrorHandler:
    """Maps domain exceptions onto HTTP responses"""

    @staticmethod
    def get_status_code(error: Exception) -> int:
        if isinstance(error, OrderValidationError):
            return 400
        return 500

    @staticmethod
    def get_error_code(error: Exception) -> str:
        if isinstance(error, OrderValidationError):
            return error.error_code
        elif isinstance(error, StoreError):
            return "STORE_ERROR"
        elif isinstance(error, NotificationError):
            return "NOTIFICATION_ERROR"
        return "INTERNAL_ERROR"

    @staticmethod
    def get_details(error: Exception) -> Optional[Any]:
        if isinstance(error, OrderValidationError):
            return error.details
        elif isinstance(error, StoreError) and error.original_error is not None:
            # Driver messages stay in the logs
            return type(error.original_error).__name__
        return None

    @staticmethod
    def create_error_response(request: Request, error: Exception) -> JSONResponse:
        """Render {error, details, code} and log with request context"""
        status_code = ErrorHandler.get_status_code(error)
        error_code = ErrorHandler.get_error_code(error)

        log = logger.warning if status_code < 500 else logger.error
        log(
            f"{type(error).__name__} in {request.method} {request.url.path}: {error}",
            extra={
                "endpoint": str(request.url.path),
                "method": request.method,
                "status_code": status_code,
                "error_code": error_code,
            }
        )

        return JSONResponse(
            status_code=status_code,
            content={
                "error": getattr(error, "message", str(error)),
                "details": ErrorHandler.get_details(error),
                "code": error_code,
            }
        )

    @staticmethod
    def internal_error_response(request: Request, error: Exception) -> JSONResponse:
        """Opaque 500 for anything unexpected, tagged with an error id"""
        error_id = str(uuid.uuid4())
        logger.error(
            f"Unhandled exception {error_id}: {type(error).__name__} in {request.method} {request.url.path}",
            extra={
                "error_id": error_id,
                "endpoint": str(request.url.path),
                "method": request.method,
                "error_type": type(error).__name__,
                "error_message": str(error),
            },
            exc_info=error
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred. Please try again later.",
                    "error_id": error_id,
                    "timestamp": datetime.utcnow().isoformat()
                }
            }
        )

def commit_or_raise(db: Session, action: str) -> None:
    """Commit the session, rolling back and raising StoreError on failure"""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Integrity error while trying to {action}: {e}")
        raise StoreError(f"Failed to {action}: database constraint violated", e)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}")
        raise StoreError(f"Failed to {action}", e)
