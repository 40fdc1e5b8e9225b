import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from postdesk.db.database import init_db
from postdesk.routes import admin, auth, pages
from postdesk.security import RequestLogMiddleware, SecurityHeadersMiddleware

logging.basicConfig(
    level=os.getenv("POSTDESK_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Postdesk",
    description="Admin panel for managing blog posts",
)

# Login rate limiting
app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Middleware
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLogMiddleware)

# Include routes
app.include_router(pages.router)
app.include_router(auth.router)
app.include_router(admin.router)

