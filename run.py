#!/usr/bin/env python3
"""
Production startup script for the Blood Bank API
"""
import uvicorn
import sys
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from bloodbank.core.config import settings
from bloodbank.core.logging import logger
from bloodbank.database.database import SessionLocal, engine, init_db
from bloodbank.services.inventory_service import expire_stale_units

def preflight() -> int:
    """Check the database and retire expired stock once, before any worker starts.

    Returns the number of units marked Expired.
    """
    logger.info(f"Database: {make_url(settings.DATABASE_URL).render_as_string(hide_password=True)}")
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    init_db()

    db = SessionLocal()
    try:
        expired = expire_stale_units(db)
    finally:
        db.close()
    logger.info(f"Startup expiry sweep: {expired} blood unit(s) marked Expired")
    return expired

def main():
    """Start the FastAPI application."""

    logger.info(f"Starting {settings.APP_NAME} Server")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug Mode: {settings.DEBUG}")
    logger.info(f"Auth header: {settings.AUTH_HEADER_NAME}")

    try:
        preflight()
    except SQLAlchemyError as e:
        logger.error(f"Database not reachable, refusing to start: {e}")
        sys.exit(1)

    # Configure uvicorn
    config = {
        "app": "bloodbank.main:app",
        "host": settings.HOST,
        "port": settings.PORT,
        "reload": settings.DEBUG,
        "log_level": settings.LOG_LEVEL.lower(),
        "access_log": True,
        "use_colors": settings.DEBUG,
    }

    if not settings.DEBUG:
        # Production settings
        config.update({
            "workers": settings.WORKERS,
            "loop": "uvloop",
            "http": "httptools",
            "lifespan": "on",
        })

    logger.info(f"Starting server on {config['host']}:{config['port']}")

    try:
        uvicorn.run(**config)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
