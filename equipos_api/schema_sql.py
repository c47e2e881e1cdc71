SCHEMA_SQL = '''
CREATE TABLE IF NOT EXISTS equipos_biomedicos (
    id INTEGER PRIMARY KEY,
    nombre TEXT,
    descripcion TEXT,
    tipoDispositivo TEXT,
    activoEnInventario INTEGER,
    ubicacion TEXT,
    numInventario TEXT,
    numSerieEquipo TEXT,
    nivelRiesgo TEXT,
    nomAplicada TEXT,
    caracteristicas TEXT,
    mantPreventivo TEXT,
    mantCorrectivo TEXT,
    img TEXT,
    usuario_id INTEGER,
    agregadoPor TEXT,
    fechaAgregado TEXT,
    editadoPorId INTEGER,
    editadoPor TEXT,
    fechaModificacion TEXT
);

-- equipo_id no declara ON DELETE: borrar un equipo deja sus mantenimientos.
CREATE TABLE IF NOT EXISTS mantenimientos_equipo (
    id INTEGER PRIMARY KEY,
    equipo_id INTEGER NOT NULL,
    client_uid TEXT,
    tipo TEXT NOT NULL CHECK (tipo IN ('PREVENTIVO','CORRECTIVO','PREDICTIVO')),
    estado TEXT NOT NULL DEFAULT 'PROGRAMADO' CHECK (estado IN ('PROGRAMADO','FINALIZADO')),
    fecha_programada TEXT NOT NULL,
    descripcion TEXT NOT NULL,
    realizado_por TEXT NOT NULL DEFAULT 'Anonimo',
    usuario_id INTEGER,
    fecha_finalizado TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    CONSTRAINT uq_client_uid UNIQUE (client_uid)
);

CREATE INDEX IF NOT EXISTS idx_mant_equipo_created ON mantenimientos_equipo(equipo_id, created_at);

CREATE TABLE IF NOT EXISTS usuarios (
    id INTEGER PRIMARY KEY,
    name TEXT,
    idempleado TEXT NOT NULL UNIQUE,
    rolempleado TEXT,
    password_hash TEXT NOT NULL,
    password_salt TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
'''
