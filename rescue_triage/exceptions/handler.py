from functools import wraps
from fastapi import HTTPException, status
from rescue_triage.exceptions.base import RescueTriageException
import logging

logger = logging.getLogger(__name__)

def handle_service_exceptions(func):
    """
    Decorator to handle service layer exceptions uniformly.
    Converts RescueTriageException to HTTPException with appropriate status codes.

    Usage:
        @handle_service_exceptions
        async def my_endpoint():
            # Service calls that may raise RescueTriageException
            result = SomeService.do_something()
            return result
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except RescueTriageException as e:
            # Convert our custom exceptions to HTTPException
            raise HTTPException(
                status_code=e.status_code,
                detail=e.detail
            )
        except HTTPException:
            # Re-raise HTTPExceptions (like 404 from controllers)
            raise
        except Exception as e:
            # Catch-all for unexpected errors
            logger.exception(f"Unhandled error in {func.__name__}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Internal server error: {str(e)}"
            )
    return wrapper
