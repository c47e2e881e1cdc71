import pytest

from equipos_api.errors import ConflictError, InvalidInputError
from equipos_api.mantenimientos import FILAS_POR_INSERT, MantenimientoStore, validate_batch, validate_edit, validate_item


def item(**overrides):
    data = {
        "tipo": "PREVENTIVO",
        "fechaProgramada": "2026-02-16T06:04:00",
        "descripcion": "Revisión",
    }
    data.update(overrides)
    return data


def fetch(database, mant_id):
    with database.connect() as con:
        return dict(con.execute("SELECT * FROM mantenimientos_equipo WHERE id = ?", (mant_id,)).fetchone())


def count(database):
    with database.connect() as con:
        return con.execute("SELECT COUNT(*) AS n FROM mantenimientos_equipo").fetchone()["n"]


# ---------------------- Validación ----------------------

def test_validate_item_defaults():
    row = validate_item(item(tipo="  CORRECTIVO "))
    assert row == {
        "client_uid": None,
        "tipo": "CORRECTIVO",
        "estado": "PROGRAMADO",
        "fecha_programada": "2026-02-16 06:04:00",
        "descripcion": "Revisión",
        "realizado_por": "Anonimo",
        "usuario_id": None,
    }


def test_validate_item_uses_front_id_as_client_uid():
    assert validate_item(item(id="tmp-1"))["client_uid"] == "tmp-1"
    assert validate_item(item(id="tmp-1", client_uid="uid-9"))["client_uid"] == "uid-9"


def test_validate_item_keeps_performer_and_user():
    row = validate_item(item(realizadoPor=" Ing. Ruiz ", usuario_id="4"))
    assert row["realizado_por"] == "Ing. Ruiz"
    assert row["usuario_id"] == 4


@pytest.mark.parametrize("overrides, message", [
    ({"tipo": "LIMPIEZA"}, "tipo inválido: LIMPIEZA"),
    ({"tipo": None}, "tipo inválido: "),
    ({"estado": "CANCELADO"}, "estado inválido: CANCELADO"),
    ({"fechaProgramada": "16/02/2026"}, "fechaProgramada inválida (usa YYYY-MM-DDTHH:mm:ss)"),
    ({"fechaProgramada": None}, "fechaProgramada inválida (usa YYYY-MM-DDTHH:mm:ss)"),
    ({"descripcion": "   "}, "descripcion requerida"),
    ({"usuario_id": "juan"}, "usuario_id inválido"),
    ({"usuario_id": 10 ** 20}, "usuario_id inválido"),
    ({"usuario_id": str(-(2 ** 63) - 1)}, "usuario_id inválido"),
])
def test_validate_item_rejections(overrides, message):
    with pytest.raises(InvalidInputError) as exc:
        validate_item(item(**overrides))
    assert exc.value.message == message


@pytest.mark.parametrize("items", [None, [], {"tipo": "PREVENTIVO"}, "items"])
def test_validate_batch_requires_non_empty_list(items):
    with pytest.raises(InvalidInputError) as exc:
        validate_batch(items)
    assert exc.value.message == "Body.items debe ser un arreglo con al menos 1 elemento"


def test_validate_batch_reports_first_failure():
    with pytest.raises(InvalidInputError) as exc:
        validate_batch([item(), item(tipo="X"), item(descripcion="")])
    assert exc.value.message == "tipo inválido: X"


def test_validate_edit_blank_performer_is_none():
    data = validate_edit({"fechaProgramada": "2026-03-01T08:00:00", "descripcion": "Cambio", "realizadoPor": " "})
    assert data["realizado_por"] is None
    assert data["usuario_id"] is None


# ---------------------- Store ----------------------

def test_create_batch_and_list(database):
    store = MantenimientoStore(database)
    inserted, first_id = store.create_batch("7", [item(client_uid="a"), item(client_uid="b", tipo="PREDICTIVO")])
    assert inserted == 2
    rows = store.list_by_equipo(7)
    assert {r["id"] for r in rows} == {first_id, first_id + 1}
    # más reciente primero
    assert rows[0]["id"] == first_id + 1
    assert all(r["estado"] == "PROGRAMADO" and r["fecha_finalizado"] is None for r in rows)
    assert store.list_by_equipo(8) == []


def test_create_batch_finalizado_gets_timestamp(database):
    store = MantenimientoStore(database)
    _, first_id = store.create_batch(7, [item(estado="FINALIZADO")])
    assert fetch(database, first_id)["fecha_finalizado"] is not None


def test_create_batch_duplicate_client_uid_is_all_or_nothing(database):
    store = MantenimientoStore(database)
    store.create_batch(7, [item(client_uid="a")])
    with pytest.raises(ConflictError):
        store.create_batch(7, [item(client_uid="nuevo"), item(client_uid="a")])
    assert count(database) == 1


def test_create_batch_duplicate_within_same_batch(database):
    store = MantenimientoStore(database)
    with pytest.raises(ConflictError):
        store.create_batch(7, [item(client_uid="x"), item(client_uid="x")])
    assert count(database) == 0


def test_create_batch_without_client_uid_never_conflicts(database):
    store = MantenimientoStore(database)
    store.create_batch(7, [item(), item()])
    store.create_batch(7, [item()])
    assert count(database) == 3


def test_create_batch_larger_than_one_insert(database):
    store = MantenimientoStore(database)
    total = FILAS_POR_INSERT * 2 + 50
    inserted, first_id = store.create_batch(7, [item(client_uid=f"u-{i}") for i in range(total)])
    assert inserted == total
    ids = sorted(r["id"] for r in store.list_by_equipo(7))
    assert ids == list(range(first_id, first_id + total))


def test_create_batch_conflict_in_last_chunk_rolls_back_everything(database):
    store = MantenimientoStore(database)
    store.create_batch(7, [item(client_uid="repetido")])
    items = [item(client_uid=f"u-{i}") for i in range(FILAS_POR_INSERT * 2)]
    items.append(item(client_uid="repetido"))
    with pytest.raises(ConflictError):
        store.create_batch(7, items)
    assert count(database) == 1


@pytest.mark.parametrize("equipo_id", [0, "0", "abc", None, -3, 2 ** 63, "99999999999999999999"])
def test_invalid_equipo_id_rejected_before_query(database, equipo_id):
    store = MantenimientoStore(database)
    with pytest.raises(InvalidInputError):
        store.list_by_equipo(equipo_id)
    with pytest.raises(InvalidInputError):
        store.create_batch(equipo_id, [item()])
    with pytest.raises(InvalidInputError):
        store.finalize_all(equipo_id)


def test_update_coalesces_performer(database):
    store = MantenimientoStore(database)
    _, mid = store.create_batch(7, [item(realizadoPor="Técnico A", usuario_id=3)])
    store.update(mid, {"fechaProgramada": "2026-03-01T10:30:00", "descripcion": "Calibración"})
    row = fetch(database, mid)
    assert row["fecha_programada"] == "2026-03-01 10:30:00"
    assert row["descripcion"] == "Calibración"
    assert row["realizado_por"] == "Técnico A"
    assert row["usuario_id"] is None

    store.update(mid, {"fechaProgramada": "2026-03-01T10:30:00", "descripcion": "Calibración",
                       "realizadoPor": "Técnico B", "usuario_id": 5})
    row = fetch(database, mid)
    assert row["realizado_por"] == "Técnico B"
    assert row["usuario_id"] == 5


def test_update_missing_record_is_conflict(database):
    store = MantenimientoStore(database)
    with pytest.raises(ConflictError):
        store.update(999, {"fechaProgramada": "2026-03-01T10:30:00", "descripcion": "x"})


def test_finalized_record_is_frozen(database):
    store = MantenimientoStore(database)
    _, mid = store.create_batch(7, [item()])
    store.finalize(mid)
    before = fetch(database, mid)
    assert before["estado"] == "FINALIZADO"
    assert before["fecha_finalizado"] is not None

    with pytest.raises(ConflictError):
        store.finalize(mid)
    with pytest.raises(ConflictError):
        store.update(mid, {"fechaProgramada": "2027-01-01T00:00:00", "descripcion": "otra", "realizadoPor": "Z"})
    assert fetch(database, mid) == before


def test_finalize_all_is_idempotent(database):
    store = MantenimientoStore(database)
    store.create_batch(7, [item(), item(), item()])
    _, other = store.create_batch(8, [item()])
    assert store.finalize_all(7) == 3
    assert store.finalize_all(7) == 0
    rows = store.list_by_equipo(7)
    assert {r["estado"] for r in rows} == {"FINALIZADO"}
    assert len({r["fecha_finalizado"] for r in rows}) == 1
    assert fetch(database, other)["estado"] == "PROGRAMADO"
