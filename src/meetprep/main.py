from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from meetprep.api.documents import router as documents_router
from meetprep.logging_config import configure_logging

configure_logging()

app = FastAPI(title="Meeting Prep Documents API")
app.include_router(documents_router)


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"
