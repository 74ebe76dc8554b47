from typing import Any, List, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, PrivateAttr, ValidationError

from core.errors import ServiceError


class ErrorDetail(BaseModel):
    path: str
    message: str


class ActionResult(BaseModel):
    """The ``{success, ...}`` envelope returned by cart, checkout and order actions."""

    success: bool
    error: Optional[str] = None
    errors: Optional[List[ErrorDetail]] = None
    order: Optional[Any] = None
    orders: Optional[Any] = None
    data: Optional[Any] = None

    _status_code: int = PrivateAttr(default=status.HTTP_200_OK)

    @property
    def status_code(self) -> int:
        return self._status_code

    def with_status(self, status_code: int) -> "ActionResult":
        self._status_code = status_code
        return self

    @classmethod
    def ok(cls, **payload) -> "ActionResult":
        return cls(success=True, **payload)

    @classmethod
    def fail(cls, exc: ServiceError) -> "ActionResult":
        return cls(success=False, error=exc.message, errors=exc.errors).with_status(exc.status_code)

    def to_response(self, success_status: int = status.HTTP_200_OK) -> JSONResponse:
        code = success_status if self.success else self.status_code
        return JSONResponse(status_code=code, content=self.model_dump(mode="json", exclude_none=True))


def validation_errors(exc: ValidationError) -> List[dict]:
    """Flatten a pydantic ValidationError into ``{path, message}`` entries."""
    return [
        {"path": ".".join(str(part) for part in err["loc"]) or "__root__", "message": err["msg"]}
        for err in exc.errors()
    ]


def request_validation_errors(errors) -> List[dict]:
    """Same as ``validation_errors`` for FastAPI request errors, without the ``body``/``query`` prefix."""
    entries = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        entries.append({"path": ".".join(str(part) for part in loc) or "__root__", "message": err["msg"]})
    return entries
