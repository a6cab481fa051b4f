# Run from project root: uvicorn app.main:app --reload

import logging

from fastapi import FastAPI

from app.api.routes import router
from app.core.config import LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s:%(name)s: %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


app = FastAPI(title="Query Routing Backend")
app.include_router(router)
