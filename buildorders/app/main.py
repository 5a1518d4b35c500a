from fastapi import FastAPI

from buildorders.app.api.v1.router import router as v1_router
from buildorders.app.core.config import settings
from buildorders.app.core.logging_config import configure_logging

configure_logging(settings.log_level)

app = FastAPI(title="BuildOrders Procurement", version="0.1.0")
app.include_router(v1_router, prefix="/v1")
