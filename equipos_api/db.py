import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

from .schema_sql import SCHEMA_SQL

logger = logging.getLogger(__name__)


class Database:
    """Recurso de proceso: ruta del archivo sqlite y un cupo acotado de conexiones.

    Se crea una sola vez en ``create_app`` y se entrega a los stores. Cuando
    las ``pool_size`` conexiones están en uso, los siguientes llamadores
    esperan su turno sin límite de cola.
    """

    def __init__(self, path, pool_size: int = 10, timeout: float = 5.0):
        self.path = Path(path)
        self.pool_size = pool_size
        self.timeout = timeout
        self._slots = threading.BoundedSemaphore(pool_size)

    def get_connection(self):
        con = sqlite3.connect(self.path, check_same_thread=False, timeout=self.timeout)
        con.row_factory = sqlite3.Row
        return con

    @contextmanager
    def connect(self):
        with self._slots:
            con = self.get_connection()
            try:
                yield con
            finally:
                con.close()

    def init_schema(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as con:
            con.executescript(SCHEMA_SQL)
            con.commit()
        logger.info("Esquema listo en %s", self.path)
