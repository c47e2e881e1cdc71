import logging
from contextlib import contextmanager

from fastapi import HTTPException

logger = logging.getLogger(__name__)


class StoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(StoreError):
    status_code = 400


class AuthenticationError(StoreError):
    status_code = 401


class NotFoundError(StoreError):
    status_code = 404


class ConflictError(StoreError):
    status_code = 409


@contextmanager
def store_errors(failure_message: str):
    """Traduce los errores de una operación de store a una única respuesta HTTP.

    Los errores de dominio conservan su código y mensaje; cualquier otro error
    (sqlite, datos guardados que no validan, etc.) se registra con traceback y
    se responde 500 con ``failure_message``.
    """
    try:
        yield
    except StoreError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception(failure_message)
        raise HTTPException(status_code=500, detail=failure_message)
