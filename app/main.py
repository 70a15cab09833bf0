import os
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from app.routes import (
    dashboard_router,
    proposals_router,
    payments_router,
    partners_router,
    service_types_router,
)
from app.database import SessionLocal, init_db, DATABASE_URL
from app.services.errors import ConsistencyViolation, InvalidArgument, NotFound, UnconfirmedWarnings
from app.services.service_types import ensure_default_service_types

# Create FastAPI app
app = FastAPI(
    title="Proposal Commissions",
    description="Sales proposals, payment ledgers and partner commissions",
    version="1.0.0"
)

# Include routers
app.include_router(dashboard_router)
app.include_router(proposals_router)
app.include_router(payments_router)
app.include_router(partners_router)
app.include_router(service_types_router)


@app.on_event("startup")
def on_startup():
    """Ensure DB is reachable and initialized at startup. Creates tables
    automatically when using a SQLite dev DB and seeds the service-type
    catalog. If initialization fails the app will raise and stop with a
    clear error message.
    """
    try:
        init_db()
        db = SessionLocal()
        try:
            ensure_default_service_types(db)
            if os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true":
                from app.seed import seed_sample_data
                seed_sample_data(db)
        finally:
            db.close()
    except Exception as e:
        # Re-raise as RuntimeError so the server fails loudly
        raise RuntimeError(
            f"Database initialization failed for DATABASE_URL={DATABASE_URL}: {e}"
        ) from e


# Error handlers
@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    """Handle missing proposals, payments, partners and service types."""
    return JSONResponse({"message": str(exc)}, status_code=404)


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    """Handle input rejected by the service layer."""
    return JSONResponse({"message": str(exc), "errors": exc.errors}, status_code=400)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as 400, like service validation."""
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        {"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
        status_code=400,
    )


@app.exception_handler(UnconfirmedWarnings)
async def unconfirmed_warnings_handler(request: Request, exc: UnconfirmedWarnings):
    """Nothing was saved; resubmit with confirm_warnings=true to accept the warnings."""
    return JSONResponse(
        {"message": "Confirmation required", "warnings": exc.warnings},
        status_code=422,
    )


@app.exception_handler(ConsistencyViolation)
async def consistency_violation_handler(request: Request, exc: ConsistencyViolation):
    """Stored totals disagree with the ledger; the write was refused."""
    logger.error("Refused %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"message": str(exc)}, status_code=409)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
