import logging
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from .errors import ConflictError, InvalidInputError
from .utils import SQL_INT_MAX, SQL_INT_MIN, iso_to_sql_datetime, strip_or_none, to_positive_id

logger = logging.getLogger(__name__)

TIPOS_VALIDOS = frozenset({"PREVENTIVO", "CORRECTIVO", "PREDICTIVO"})
ESTADOS_VALIDOS = frozenset({"PROGRAMADO", "FINALIZADO"})
ESTADO_PROGRAMADO = "PROGRAMADO"
ESTADO_FINALIZADO = "FINALIZADO"
REALIZADO_POR_DEFAULT = "Anonimo"
# 9 parámetros por fila; 100 filas quedan bajo el límite clásico de 999 variables de sqlite
FILAS_POR_INSERT = 100

COLUMNAS_INSERT = (
    "equipo_id",
    "client_uid",
    "tipo",
    "estado",
    "fecha_programada",
    "descripcion",
    "realizado_por",
    "usuario_id",
)

COLUMNAS_LISTADO = """
    id, equipo_id, client_uid, tipo, estado,
    fecha_programada, descripcion, realizado_por, usuario_id,
    fecha_finalizado, created_at, updated_at
"""


# ---------------------- Validación ----------------------

def _texto(value) -> str:
    return str(value or "").strip()


def _usuario_id(value) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidInputError("usuario_id inválido")
    try:
        n = value if isinstance(value, int) else int(str(value).strip())
    except ValueError:
        raise InvalidInputError("usuario_id inválido")
    if not SQL_INT_MIN <= n <= SQL_INT_MAX:
        raise InvalidInputError("usuario_id inválido")
    return n


def _client_uid(item: Dict[str, Any]) -> Optional[str]:
    # el front reenvía su id local como client_uid cuando no manda uno explícito
    raw = item.get("client_uid")
    if raw is None:
        raw = item.get("id")
    return strip_or_none(raw)


def validate_item(item: Any) -> Dict[str, Any]:
    """Valida una propuesta de mantenimiento y devuelve la fila lista para insertar."""
    if not isinstance(item, dict):
        raise InvalidInputError("Cada mantenimiento debe ser un objeto")
    tipo = _texto(item.get("tipo"))
    estado = _texto(item.get("estado") or ESTADO_PROGRAMADO)
    fecha = iso_to_sql_datetime(item.get("fechaProgramada"))
    descripcion = _texto(item.get("descripcion"))
    realizado_por = _texto(item.get("realizadoPor")) or REALIZADO_POR_DEFAULT

    if tipo not in TIPOS_VALIDOS:
        raise InvalidInputError(f"tipo inválido: {tipo}")
    if estado not in ESTADOS_VALIDOS:
        raise InvalidInputError(f"estado inválido: {estado}")
    if not fecha:
        raise InvalidInputError("fechaProgramada inválida (usa YYYY-MM-DDTHH:mm:ss)")
    if not descripcion:
        raise InvalidInputError("descripcion requerida")

    return {
        "client_uid": _client_uid(item),
        "tipo": tipo,
        "estado": estado,
        "fecha_programada": fecha,
        "descripcion": descripcion,
        "realizado_por": realizado_por,
        "usuario_id": _usuario_id(item.get("usuario_id")),
    }


def validate_batch(items: Any) -> List[Dict[str, Any]]:
    """Todo o nada: el primer ítem inválido rechaza el lote completo."""
    if not isinstance(items, list) or not items:
        raise InvalidInputError("Body.items debe ser un arreglo con al menos 1 elemento")
    return [validate_item(it) for it in items]


def validate_edit(payload: Any) -> Dict[str, Any]:
    payload = payload if isinstance(payload, dict) else {}
    fecha = iso_to_sql_datetime(payload.get("fechaProgramada"))
    descripcion = _texto(payload.get("descripcion"))
    if not fecha:
        raise InvalidInputError("fechaProgramada inválida")
    if not descripcion:
        raise InvalidInputError("descripcion requerida")
    return {
        "fecha_programada": fecha,
        "descripcion": descripcion,
        # None conserva el realizado_por anterior (COALESCE)
        "realizado_por": strip_or_none(payload.get("realizadoPor")),
        "usuario_id": _usuario_id(payload.get("usuario_id")),
    }


def _require_id(raw, message: str) -> int:
    value = to_positive_id(raw)
    if value is None:
        raise InvalidInputError(message)
    return value


def _insert_statement(equipo_id: int, rows: List[Dict[str, Any]]) -> Tuple[str, List[Any]]:
    placeholders = ", ".join(
        "(?,?,?,?,?,?,?,?, CASE WHEN ? = 'FINALIZADO' THEN datetime('now') END)" for _ in rows
    )
    sql = f"""
        INSERT INTO mantenimientos_equipo
        ({", ".join(COLUMNAS_INSERT)}, fecha_finalizado)
        VALUES {placeholders}
    """
    params: List[Any] = []
    for row in rows:
        values = {"equipo_id": equipo_id, **row}
        params.extend(values[c] for c in COLUMNAS_INSERT)
        params.append(row["estado"])
    return sql, params


# ---------------------- Store ----------------------

class MantenimientoStore:
    """Registros de ``mantenimientos_equipo``.

    Un mantenimiento nace PROGRAMADO y pasa una sola vez a FINALIZADO. Las
    ediciones y finalizaciones son una única sentencia condicionada al estado,
    de modo que un registro FINALIZADO nunca se modifica. Los lotes se insertan
    en tramos de ``FILAS_POR_INSERT`` filas dentro de una sola transacción.
    """

    def __init__(self, database):
        self.database = database

    def list_by_equipo(self, equipo_id) -> List[Dict[str, Any]]:
        eid = _require_id(equipo_id, "equipoId inválido")
        with self.database.connect() as con:
            rows = con.execute(
                f"""
                SELECT {COLUMNAS_LISTADO}
                FROM mantenimientos_equipo
                WHERE equipo_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (eid,),
            ).fetchall()
            return [dict(r) for r in rows]

    def create_batch(self, equipo_id, items: Any) -> Tuple[int, int]:
        eid = _require_id(equipo_id, "equipoId inválido")
        rows = validate_batch(items)

        with self.database.connect() as con:
            cur = con.cursor()
            inserted = 0
            first_id = None
            try:
                # todos los tramos van en la misma transacción: o entra el lote entero o nada
                for start in range(0, len(rows), FILAS_POR_INSERT):
                    cur.execute(*_insert_statement(eid, rows[start:start + FILAS_POR_INSERT]))
                    if first_id is None:
                        first_id = cur.lastrowid - cur.rowcount + 1
                    inserted += cur.rowcount
            except sqlite3.IntegrityError as e:
                con.rollback()
                # duplicado por uq_client_uid
                if "client_uid" in str(e):
                    logger.info("Lote de mantenimientos repetido para equipo %s: %s", eid, e)
                    raise ConflictError("Duplicado: client_uid ya existe (reintento del front)")
                raise
            con.commit()
        logger.info("Mantenimientos insertados: equipo=%s cantidad=%s primer_id=%s", eid, inserted, first_id)
        return inserted, first_id

    def update(self, mant_id, payload: Any) -> None:
        mid = _require_id(mant_id, "id inválido")
        data = validate_edit(payload)
        with self.database.connect() as con:
            cur = con.execute(
                """
                UPDATE mantenimientos_equipo
                SET fecha_programada = ?, descripcion = ?, realizado_por = COALESCE(?, realizado_por),
                    usuario_id = ?, updated_at = datetime('now')
                WHERE id = ? AND estado = 'PROGRAMADO'
                """,
                (data["fecha_programada"], data["descripcion"], data["realizado_por"], data["usuario_id"], mid),
            )
            if cur.rowcount == 0:
                raise ConflictError("No se pudo editar (no existe o ya está FINALIZADO)")
            con.commit()
        logger.info("Mantenimiento %s actualizado", mid)

    def finalize(self, mant_id) -> None:
        mid = _require_id(mant_id, "id inválido")
        with self.database.connect() as con:
            cur = con.execute(
                """
                UPDATE mantenimientos_equipo
                SET estado = 'FINALIZADO', fecha_finalizado = datetime('now'), updated_at = datetime('now')
                WHERE id = ? AND estado = 'PROGRAMADO'
                """,
                (mid,),
            )
            if cur.rowcount == 0:
                raise ConflictError("No se pudo finalizar (no existe o ya está FINALIZADO)")
            con.commit()
        logger.info("Mantenimiento %s finalizado", mid)

    def finalize_all(self, equipo_id) -> int:
        eid = _require_id(equipo_id, "equipoId inválido")
        with self.database.connect() as con:
            # datetime('now') es estable dentro de una sentencia: todos comparten la marca
            cur = con.execute(
                """
                UPDATE mantenimientos_equipo
                SET estado = 'FINALIZADO', fecha_finalizado = datetime('now'), updated_at = datetime('now')
                WHERE equipo_id = ? AND estado = 'PROGRAMADO'
                """,
                (eid,),
            )
            affected = cur.rowcount
            con.commit()
        logger.info("Finalizados %s mantenimientos del equipo %s", affected, eid)
        return affected
