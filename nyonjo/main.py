import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nyonjo.core.config import settings
from nyonjo.core.exceptions import register_exception_handlers
from nyonjo.core.logging import RequestLoggingMiddleware, setup_logging
from nyonjo.db.session import create_db_and_tables
from nyonjo.routers import admin, auth, blog, contact, homepage, products, sisterhood

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    create_db_and_tables()
    logger.info("%s started", settings.PROJECT_NAME)
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan,
    description="API for the Nyonjo Herbs store, blog and Sisterhood community"
)

register_exception_handlers(app)

@app.get("/")
def read_root():
    return {"message": "Welcome to the Nyonjo Herbs API. Visit /docs for Swagger UI."}

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(products.router, prefix="/api/products", tags=["products"])
app.include_router(blog.router, prefix="/api/blog", tags=["blog"])
app.include_router(sisterhood.router, prefix="/api/sisterhood", tags=["sisterhood"])
app.include_router(contact.router, prefix="/api/contact", tags=["contact"])
app.include_router(homepage.router, prefix="/api/homepage", tags=["homepage"])
app.include_router(auth.router, prefix="/api/admin", tags=["auth"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
