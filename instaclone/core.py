import os
import asyncio
from prometheus_client import start_http_server
import logging

logger = logging.getLogger(__name__)

# Support both MONGODB_URI (preferred) and legacy MONGO_URL
MONGODB_URI = os.getenv('MONGODB_URI') or os.getenv('MONGO_URL', 'mongodb://mongo:27017')
MONGODB_DB = os.getenv('MONGODB_DB', 'instagram_clone')
REGISTRY_COLLECTION = 'namesdata'

HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '3000'))
METRICS_PORT = int(os.getenv('METRICS_PORT', '8001'))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# 50MB, large enough for inline base64 images
MAX_BODY_BYTES = int(os.getenv('MAX_BODY_BYTES', str(50 * 1024 * 1024)))
SWEEP_INTERVAL_SECONDS = float(os.getenv('SWEEP_INTERVAL_SECONDS', str(60 * 60)))

MONGO = None


class StorageUnavailableError(RuntimeError):
    """Raised when an operation needs MongoDB but no client is connected."""


def get_db():
    """Return the application database, failing loudly when not connected."""
    if MONGO is None:
        raise StorageUnavailableError('MongoDB client is not connected')
    return MONGO[MONGODB_DB]


def init_metrics(port: int = METRICS_PORT):
    """Initialize Prometheus metrics server"""
    if not port:
        logger.info("Prometheus metrics server disabled")
        return
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except Exception as e:
        logger.warning(f'Prometheus start failed: {e}')


async def mongo_startup():
    """Start MongoDB connection with retries"""
    global MONGO

    from motor.motor_asyncio import AsyncIOMotorClient

    max_retries = 3
    retry_delay = 3  # seconds

    for attempt in range(max_retries):
        try:
            logger.info(f"Attempting to connect to MongoDB (attempt {attempt + 1}/{max_retries})")

            MONGO = AsyncIOMotorClient(
                MONGODB_URI,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                maxPoolSize=50,
                retryWrites=True,
                retryReads=True
            )

            # Test the connection
            await MONGO.admin.command('ping')

            logger.info(f"MongoDB connected successfully, database {MONGODB_DB}")
            break

        except Exception as e:
            logger.warning(f'MongoDB startup attempt {attempt + 1} failed: {e}')
            if MONGO is not None:
                MONGO.close()
                MONGO = None

            if attempt < max_retries - 1:
                logger.info(f"Retrying MongoDB connection in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
            else:
                logger.error("Failed to connect to MongoDB after all retries")


async def shutdown_connections():
    """Close the MongoDB client if one is open"""
    global MONGO
    logger.info("Shutting down connections...")

    if MONGO is not None:
        try:
            MONGO.close()
            logger.info("MongoDB connection closed")
        except Exception as e:
            logger.error(f"Error closing MongoDB connection: {e}")
        MONGO = None
