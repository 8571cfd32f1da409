"""
Vercel entry point.

Vercel runs files under api/ as serverless functions; Mangum adapts the
FastAPI app to the Lambda-style event Vercel hands over.
"""

import os
import sys
from pathlib import Path

# The proxy modules live one directory up
sys.path.insert(0, str(Path(__file__).parent.parent))

os.environ.setdefault("VERCEL", "1")

from app import app as application
from config import validate_config_on_startup
from logger import get_logger
from mangum import Mangum

logger = get_logger(__name__)

# The lifespan is disabled under Mangum, so validate once per cold start here
try:
    validate_config_on_startup()
except ValueError as e:
    logger.error(f"Configuration validation failed: {e}")

handler = Mangum(application, lifespan="off")

__all__ = ["handler", "application"]
