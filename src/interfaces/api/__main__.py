"""Run the dashboard API with uvicorn.

Entry point: python -m src.interfaces.api
"""

import uvicorn

from src.config import settings

if __name__ == "__main__":
    uvicorn.run("src.interfaces.api.main:app", host=settings.host, port=settings.port)
