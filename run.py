# run.py
import sys

import uvicorn

from image_queue.core.config import settings
from image_queue.core.logging import logger

if __name__ == "__main__":
    logger.info(f"Starting {settings.PROJECT_NAME} on {settings.HOST}:{settings.PORT}")
    try:
        uvicorn.run("image_queue.main:app", host=settings.HOST, port=settings.PORT, reload=settings.RELOAD)
    except Exception as e:
        logger.error(f"Error starting server: {str(e)}")
        sys.exit(1)
