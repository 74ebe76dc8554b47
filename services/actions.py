import logging
from typing import Callable

from fastapi import status
from sqlalchemy.orm import Session

from core.errors import ServiceError
from schemas.envelope import ActionResult

logger = logging.getLogger("grocer.actions")


def run_action(db: Session, action: str, fn: Callable[..., ActionResult], *args, **kwargs) -> ActionResult:
    """Run a service action, turning failures into an ``ActionResult``.

    ``ServiceError`` keeps its message and field errors. Anything else is
    logged with its traceback and reported as a generic failure, so no
    exception crosses the service boundary.
    """
    try:
        return fn(*args, **kwargs)
    except ServiceError as exc:
        db.rollback()
        logger.info("%s failed: %s", action, exc.message)
        return ActionResult.fail(exc)
    except Exception:
        db.rollback()
        logger.exception("%s: unexpected error", action)
        return ActionResult(success=False, error="An unexpected error occurred").with_status(
            status.HTTP_500_INTERNAL_SERVER_ERROR
        )
