# create_tables.py
import logging

from database import engine, Base
# Importa todos los modelos para que se registren con Base
from modules.auth.models.user import User  # noqa: F401
from modules.contracts.models import Contract, ContractTemplate, GuestAccessToken  # noqa: F401
from modules.notifications.models.notification import Notification  # noqa: F401

logger = logging.getLogger(__name__)


def crear_tablas():
    """Crea todas las tablas en la base de datos"""
    logger.info("Tables to create: %s", list(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    crear_tablas()
