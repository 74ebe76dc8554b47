import os
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from dotenv import load_dotenv

from core.celery import celery_app
from core.config import settings
from core.db import init_db
from core.logger import configure_logging
from routes.auth import router as auth_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router, admin_router as admin_orders_router
from routes.products import router as products_router
from routes.stores import router as stores_router
from schemas.envelope import ActionResult, request_validation_errors

load_dotenv()
configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# Add OpenAPI security schemes for Bearer token authentication on docs/redoc
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

# Routes answering with the {success, ...} envelope
ENVELOPE_PREFIXES = ("/cart", "/orders")


@app.exception_handler(RequestValidationError)
async def envelope_validation_handler(request: Request, exc: RequestValidationError):
    if not request.url.path.startswith(ENVELOPE_PREFIXES):
        return await request_validation_exception_handler(request, exc)
    errors = request_validation_errors(exc.errors())
    result = ActionResult(success=False, error="Validation failed", errors=errors).with_status(422)
    return result.to_response()


# Ensure tables exist (for dev/test; in prod use migrations)
init_db()

app.include_router(auth_router)
app.include_router(stores_router)
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(admin_orders_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
    }


@app.get("/celery-health")
async def celery_health_check():
    """Check that a Celery worker is available for order emails"""
    try:
        stats = celery_app.control.inspect(timeout=1.0).stats()
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
    if stats:
        return {"status": "healthy", "workers": len(stats)}
    return {"status": "no_workers", "message": "No Celery workers running"}


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.DEBUG,
    )
