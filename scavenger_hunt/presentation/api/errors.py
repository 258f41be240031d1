import logging

from fastapi import HTTPException

from scavenger_hunt.core.exceptions import ScavengerHuntError

logger = logging.getLogger(__name__)


def to_http_exception(exc: ScavengerHuntError) -> HTTPException:
    """Map a domain error to the HTTP error returned to the caller."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}", exc_info=exc)
    else:
        logger.warning(f"Request rejected ({exc.status_code}): {exc.message}")
    return HTTPException(status_code=exc.status_code, detail=exc.detail)
