from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import config
from app.core.db.engine import create_tables, dispose_engine
from app.core.error_handler import register_exception_handlers
from app.core.middleware.request_id_middleware import RequestIDMiddleware
from app.core.responses import ApiResponse, success_response
from app.modules.auth.controller import router as auth_router
from app.modules.expenses.controller import router as expenses_router
from app.utils.datetime import utc_now


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Migrations own the schema in production
    if not config.is_production:
        await create_tables()
    yield
    await dispose_engine()


app = FastAPI(
    title="Expense Tracker API",
    description="Personal expense tracking with per-user data isolation",
    version=config.app_version,
    lifespan=lifespan,
)

# Exception handlers
register_exception_handlers(app)

# Middlewares
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.cors_origin],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)

# Routers
api_router = APIRouter(prefix="/api")


@api_router.get("/health", response_model=ApiResponse, response_model_exclude_none=True)
async def health() -> ApiResponse:
    return success_response(
        "API is running successfully",
        {
            "timestamp": utc_now().isoformat(),
            "environment": config.environment,
            "version": config.app_version,
        },
    )


api_router.include_router(auth_router)
api_router.include_router(expenses_router)
app.include_router(api_router)


@app.get("/", response_model=ApiResponse, response_model_exclude_none=True)
async def root(request: Request) -> ApiResponse:
    return success_response(
        "Welcome to Expense Tracker API",
        {
            "version": config.app_version,
            "documentation": "/api/health",
            "endpoints": {"auth": "/api/auth", "expenses": "/api/expenses"},
            "request_id": str(request.state.request_id),
        },
    )
