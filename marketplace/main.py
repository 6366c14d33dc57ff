# marketplace/main.py
import uvicorn

from marketplace.api import create_app
from marketplace.data.database import Base, engine
from marketplace.utils.logging import get_logger

# import every model before create_all
import marketplace.data.models  # noqa: F401

logger = get_logger(__name__)

logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")

try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
