# hapibara/main.py
import uvicorn

from hapibara.api import create_app
from hapibara.data.database import init_db
from hapibara.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

# bez migracji: create_all tworzy brakujace tabele, istniejacych nie rusza
try:
    init_db()
except Exception as e:
    logger.error("Failed to create tables", error=str(e))
    raise
logger.info("Database tables ready")

app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
