import os
import sys
import json
from loguru import logger as loguru_logger

from image_queue.core.config import settings

# Remove default logger
loguru_logger.remove()


class CloudLoggingAdapter:
    """
    Adapter to convert Loguru log records to Cloud Logging compatible JSON format
    """
    def __init__(self):
        self.env = os.getenv("ENV", "development")
        self.service_name = settings.PROJECT_NAME

    def write(self, message):
        record = message.record

        # Basic structure required by Cloud Logging
        cloud_log = {
            "severity": record["level"].name,
            "time": record["time"].isoformat(),
            "message": record["message"],
            "logger": record["name"],
            "logging.googleapis.com/labels": {
                "environment": self.env,
                "service": self.service_name
            }
        }

        # Bound fields (logger.bind(...) / extra=...)
        for k, v in record["extra"].items():
            cloud_log[k] = v

        if record["exception"] is not None:
            exc_type, exc_value, _ = record["exception"]
            cloud_log["exception"] = f"{exc_type.__name__ if exc_type else 'Exception'}: {exc_value}"

        # Print as JSON for Cloud Logging structured logs
        print(json.dumps(cloud_log, default=str), file=sys.stderr)


loguru_logger.add(
    CloudLoggingAdapter().write,
    level=settings.LOG_LEVEL,
    format="{message}",
)

# Export the logger
logger = loguru_logger
