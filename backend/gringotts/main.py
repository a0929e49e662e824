"""Gringotts - Subscription Billing API."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gringotts.config import get_settings
from gringotts.services.billing_periods import InvalidArgument

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: Create tables and load projects
    from gringotts.database import Base, engine, SessionLocal
    from gringotts.services.project_loader import load_startup_projects

    # Import all models so they're registered with Base
    from gringotts import models  # noqa: F401

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        load_startup_projects(db)
    finally:
        db.close()

    yield


app = FastAPI(
    title=settings.app_name,
    description="Subscription billing with anchor-date billing periods",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    """Report invalid billing dates as a client error."""
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


# Import and include routers
from gringotts.api import auth, customers, invoices, payment_methods, payments, subscriptions  # noqa: E402

app.include_router(auth.router, prefix="/api")
app.include_router(customers.router, prefix="/api")
app.include_router(payment_methods.router, prefix="/api")
app.include_router(subscriptions.router, prefix="/api")
app.include_router(invoices.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
