import uvicorn

from content_service.config import settings
from content_service.main import app  # noqa: F401

if __name__ == "__main__":
    uvicorn.run("content_service.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
