import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .errors import InvalidInputError, NotFoundError
from .schemas import Equipo, EquipoCreate, EquipoUpdate
from .utils import iso_to_sql_datetime, json_dumps, json_loads_list, now_sql_datetime, strip_or_none, to_positive_id

logger = logging.getLogger(__name__)

CAMPOS_ESCALARES = (
    "nombre",
    "descripcion",
    "tipoDispositivo",
    "activoEnInventario",
    "ubicacion",
    "numInventario",
    "numSerieEquipo",
    "nivelRiesgo",
    "nomAplicada",
    "img",
)
CAMPOS_JSON = ("caracteristicas", "mantPreventivo", "mantCorrectivo")


def _row_to_equipo(row) -> Equipo:
    d = dict(row)
    for k in CAMPOS_JSON:
        d[k] = json_loads_list(d.get(k))
    return Equipo.model_validate(d)


def _storage_values(data) -> Dict[str, Any]:
    values = {k: getattr(data, k) for k in CAMPOS_ESCALARES}
    for k in CAMPOS_JSON:
        values[k] = json_dumps([
            entry.model_dump() if isinstance(entry, BaseModel) else entry for entry in getattr(data, k)
        ])
    return values


def _fecha_registro(value: Optional[str]) -> str:
    # ISO completo se normaliza; cualquier otro texto se guarda tal cual llega
    return iso_to_sql_datetime(value) or strip_or_none(value) or now_sql_datetime()


class EquipoStore:
    def __init__(self, database):
        self.database = database

    def list_all(self) -> List[Equipo]:
        with self.database.connect() as con:
            rows = con.execute("SELECT * FROM equipos_biomedicos ORDER BY id").fetchall()
            return [_row_to_equipo(r) for r in rows]

    def get(self, equipo_id) -> Equipo:
        eid = to_positive_id(equipo_id)
        with self.database.connect() as con:
            row = con.execute("SELECT * FROM equipos_biomedicos WHERE id = ?", (eid,)).fetchone()
        if not row:
            raise NotFoundError("Equipo no encontrado")
        return _row_to_equipo(row)

    def create(self, data: EquipoCreate) -> Equipo:
        values = _storage_values(data)
        values.update({
            "usuario_id": data.usuario_id,
            "agregadoPor": data.agregadoPor,
            "fechaAgregado": _fecha_registro(data.fechaAgregado),
        })
        cols = ", ".join(values.keys())
        vals = ":" + ", :".join(values.keys())
        with self.database.connect() as con:
            cur = con.cursor()
            cur.execute(f"INSERT INTO equipos_biomedicos ({cols}) VALUES ({vals})", values)
            new_id = cur.lastrowid
            # la relectura va en la misma transacción que el insert
            row = cur.execute("SELECT * FROM equipos_biomedicos WHERE id = ?", (new_id,)).fetchone()
            con.commit()
        logger.info("Equipo %s creado por usuario %s", new_id, data.usuario_id)
        return _row_to_equipo(row)

    def update(self, equipo_id, data: EquipoUpdate) -> Equipo:
        """Reemplazo completo del registro: todos los atributos llegan en cada llamada."""
        eid = to_positive_id(equipo_id)
        if eid is None:
            raise InvalidInputError("ID del equipo es requerido")
        values = _storage_values(data)
        values.update({
            "editadoPorId": data.usuario_id,
            "editadoPor": data.editadoPor,
            "fechaModificacion": _fecha_registro(data.fechaModificacion),
        })
        sets = ", ".join(f"{k} = :{k}" for k in values.keys())
        with self.database.connect() as con:
            cur = con.cursor()
            cur.execute(f"UPDATE equipos_biomedicos SET {sets} WHERE id = :id", {**values, "id": eid})
            if cur.rowcount == 0:
                raise NotFoundError("Equipo no encontrado")
            row = cur.execute("SELECT * FROM equipos_biomedicos WHERE id = ?", (eid,)).fetchone()
            con.commit()
        logger.info("Equipo %s actualizado por usuario %s", eid, data.usuario_id)
        return _row_to_equipo(row)

    def delete(self, equipo_id) -> None:
        # sin cascada: los mantenimientos del equipo quedan en la tabla
        eid = to_positive_id(equipo_id)
        with self.database.connect() as con:
            cur = con.execute("DELETE FROM equipos_biomedicos WHERE id = ?", (eid,))
            if cur.rowcount == 0:
                raise NotFoundError("Equipo no encontrado")
            con.commit()
        logger.info("Equipo %s eliminado", eid)
