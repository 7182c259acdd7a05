from fastapi import FastAPI

from api.routes import router
from utils.logging_config import configure_logging

configure_logging()

app = FastAPI(
    title="Home Store API",
    version="0.1.0",
    description="Per-user named homes with quotas over SQLite, PostgreSQL or MySQL",
)
app.include_router(router)
