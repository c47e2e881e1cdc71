from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import PlainTextResponse

from .equipos import EquipoStore
from .errors import store_errors
from .mantenimientos import MantenimientoStore
from .schemas import EquipoCreate, EquipoUpdate, LoginUsuario, RegistroUsuario
from .usuarios import SqliteUserDirectory, UserDirectory

router = APIRouter()


def get_equipo_store(request: Request) -> EquipoStore:
    return EquipoStore(request.app.state.database)


def get_mantenimiento_store(request: Request) -> MantenimientoStore:
    return MantenimientoStore(request.app.state.database)


def get_user_directory(request: Request) -> UserDirectory:
    return SqliteUserDirectory(request.app.state.database, request.app.state.hasher)


@router.get("/", response_class=PlainTextResponse)
def index():
    return "API funcionando"


# ---------------------- Equipos ----------------------

@router.get("/equipos_biomedicos")
def list_equipos(store: EquipoStore = Depends(get_equipo_store)):
    with store_errors("Error al obtener equipos"):
        return store.list_all()


@router.get("/equipos_biomedicos/{equipo_id}")
def get_equipo(equipo_id: str, store: EquipoStore = Depends(get_equipo_store)):
    with store_errors("Error al obtener el equipo"):
        return store.get(equipo_id)


@router.post("/equipos_biomedicos", status_code=201)
def create_equipo(payload: EquipoCreate, store: EquipoStore = Depends(get_equipo_store)):
    with store_errors("Error al insertar equipo"):
        equipo = store.create(payload)
    return {"message": "Equipo guardado exitosamente", "equipo": equipo}


@router.put("/equipos_biomedicos/{equipo_id}")
def update_equipo(equipo_id: str, payload: EquipoUpdate, store: EquipoStore = Depends(get_equipo_store)):
    with store_errors("Error al actualizar el equipo"):
        equipo = store.update(equipo_id, payload)
    return {"message": "Equipo actualizado exitosamente", "equipo": equipo}


@router.delete("/equipos_biomedicos/{equipo_id}")
def delete_equipo(equipo_id: str, store: EquipoStore = Depends(get_equipo_store)):
    with store_errors("Error al eliminar el equipo"):
        store.delete(equipo_id)
    return {"success": True}


# ---------------------- Mantenimientos ----------------------

@router.get("/equipos_biomedicos/{equipo_id}/mantenimientos")
def list_mantenimientos(equipo_id: str, store: MantenimientoStore = Depends(get_mantenimiento_store)):
    with store_errors("Error al obtener mantenimientos"):
        return store.list_by_equipo(equipo_id)


@router.post("/equipos_biomedicos/{equipo_id}/mantenimientos", status_code=201)
def create_mantenimientos(
    equipo_id: str,
    payload: Any = Body(None),
    store: MantenimientoStore = Depends(get_mantenimiento_store),
):
    items = payload.get("items") if isinstance(payload, dict) else None
    with store_errors("Error al insertar mantenimientos"):
        inserted, first_id = store.create_batch(equipo_id, items)
    return {"message": "Mantenimientos guardados", "insertedCount": inserted, "firstInsertId": first_id}


@router.patch("/equipos_biomedicos/{equipo_id}/mantenimientos/finalizar_todos")
def finalize_all_mantenimientos(equipo_id: str, store: MantenimientoStore = Depends(get_mantenimiento_store)):
    with store_errors("Error al finalizar todos"):
        affected = store.finalize_all(equipo_id)
    return {"message": "OK", "afectados": affected}


@router.patch("/mantenimientos/{mant_id}")
def update_mantenimiento(
    mant_id: str,
    payload: Any = Body(None),
    store: MantenimientoStore = Depends(get_mantenimiento_store),
):
    with store_errors("Error al editar mantenimiento"):
        store.update(mant_id, payload)
    return {"message": "Mantenimiento actualizado"}


@router.patch("/mantenimientos/{mant_id}/finalizar")
def finalize_mantenimiento(mant_id: str, store: MantenimientoStore = Depends(get_mantenimiento_store)):
    with store_errors("Error al finalizar mantenimiento"):
        store.finalize(mant_id)
    return {"message": "Mantenimiento finalizado"}


# ---------------------- Usuarios ----------------------

@router.post("/register", status_code=201)
def register(payload: RegistroUsuario, directory: UserDirectory = Depends(get_user_directory)):
    with store_errors("Error al registrar el usuario"):
        user = directory.register(payload.name, payload.idempleado, payload.rolempleado, payload.password)
    return {"message": "Registro exitoso", "user": user}


@router.post("/login")
def login(payload: LoginUsuario, directory: UserDirectory = Depends(get_user_directory)):
    with store_errors("Error al verificar el login"):
        user = directory.authenticate(payload.idempleado, payload.password)
    return {"message": "Login exitoso", "user": user}
