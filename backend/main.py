from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .database import engine, Base
from .routers import accounts, drafts, leads, notifications, pdf, pricing, quotes

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("quotation")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Road Safety Quotation & CRM",
    description="Quotation engine and sales CRM for crash barriers and reflective signage",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(pricing.router, prefix="/api")
app.include_router(drafts.router, prefix="/api")
app.include_router(quotes.router, prefix="/api")
app.include_router(pdf.router, prefix="/api")
app.include_router(accounts.router, prefix="/api")
app.include_router(leads.router, prefix="/api")
app.include_router(notifications.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "roadsafety-quotation"}


@app.on_event("startup")
def log_startup():
    logger.info("Started %s quotation service (db: %s)", settings.COMPANY_NAME,
                settings.DATABASE_URL.split("://")[0])
