import logging

from homecare.db.session import engine
from homecare.db.base import Base  # Imports all models so they are registered

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables():
    logger.info(f"Creating all tables on {engine.url.render_as_string(hide_password=True)}...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created.")


if __name__ == "__main__":
    create_tables()
