import hashlib
import hmac
import logging
import secrets
import sqlite3
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .errors import AuthenticationError, InvalidInputError
from .utils import strip_or_none

logger = logging.getLogger(__name__)


class CredentialHasher:
    """Hash salado SHA-256. Se inyecta en el directorio para poder reemplazarlo."""

    def new_salt(self) -> str:
        return secrets.token_hex(16)

    def hash_password(self, password: str, salt: str) -> str:
        return hashlib.sha256((salt + password).encode("utf-8")).hexdigest()

    def verify_password(self, password: str, salt: str, password_hash: str) -> bool:
        return hmac.compare_digest(self.hash_password(password, salt), password_hash)


class UserDirectory(ABC):
    @abstractmethod
    def register(self, name: Optional[str], idempleado: Optional[str], rolempleado: Optional[str],
                 password: Optional[str]) -> Dict[str, object]:
        ...

    @abstractmethod
    def authenticate(self, idempleado: Optional[str], password: Optional[str]) -> Dict[str, object]:
        ...


def _public(row) -> Dict[str, object]:
    return {
        "id": row["id"],
        "name": row["name"],
        "idempleado": row["idempleado"],
        "rolempleado": row["rolempleado"],
    }


class SqliteUserDirectory(UserDirectory):
    """Usuarios en la tabla ``usuarios``, identificados por ``idempleado``."""

    def __init__(self, database, hasher: Optional[CredentialHasher] = None):
        self.database = database
        self.hasher = hasher or CredentialHasher()

    def register(self, name, idempleado, rolempleado, password):
        idempleado = strip_or_none(idempleado)
        if not idempleado or not password:
            raise InvalidInputError("idempleado y password son requeridos")
        salt = self.hasher.new_salt()
        pwd_hash = self.hasher.hash_password(password, salt)
        with self.database.connect() as con:
            cur = con.cursor()
            existing = cur.execute("SELECT id FROM usuarios WHERE idempleado = ?", (idempleado,)).fetchone()
            if existing:
                raise InvalidInputError("El usuario ya existe")
            try:
                cur.execute(
                    "INSERT INTO usuarios (name, idempleado, rolempleado, password_hash, password_salt) VALUES (?,?,?,?,?)",
                    (name, idempleado, rolempleado, pwd_hash, salt),
                )
            except sqlite3.IntegrityError:
                # otro registro con el mismo idempleado entró entre el SELECT y el INSERT
                raise InvalidInputError("El usuario ya existe")
            user_id = cur.lastrowid
            con.commit()
        logger.info("Usuario registrado: idempleado=%s", idempleado)
        return {"id": user_id, "name": name, "idempleado": idempleado, "rolempleado": rolempleado}

    def authenticate(self, idempleado, password):
        idempleado = strip_or_none(idempleado)
        if not idempleado or not password:
            raise AuthenticationError("Credenciales incorrectas")
        with self.database.connect() as con:
            row = con.execute(
                "SELECT id, name, idempleado, rolempleado, password_hash, password_salt FROM usuarios WHERE idempleado = ?",
                (idempleado,),
            ).fetchone()
        if not row or not self.hasher.verify_password(password, row["password_salt"], row["password_hash"]):
            logger.warning("Login fallido para idempleado=%s", idempleado)
            raise AuthenticationError("Credenciales incorrectas")
        return _public(row)
