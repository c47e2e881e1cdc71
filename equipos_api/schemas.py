from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, field_validator

from .utils import SQL_INT_MAX, SQL_INT_MIN


class Caracteristica(BaseModel):
    """Entrada de la lista de características de un equipo (``{nombre, valor}``)."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    nombre: Optional[str] = None
    valor: Optional[Union[bool, int, float, str]] = None


class ActividadMantenimiento(BaseModel):
    """Entrada de un plan de mantenimiento preventivo o correctivo."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    descripcion: Optional[str] = None
    frecuencia: Optional[str] = None


# el front también guarda entradas sueltas ("Voltaje 120V"), no solo objetos
EntradaSuelta = Union[StrictBool, StrictInt, StrictFloat, StrictStr, List[Any], None]
# sqlite guarda INTEGER con signo de 64 bits
UsuarioId = Optional[Annotated[int, Field(ge=SQL_INT_MIN, le=SQL_INT_MAX)]]


class EquipoBase(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    nombre: Optional[str] = None
    descripcion: Optional[str] = None
    tipoDispositivo: Optional[str] = None
    activoEnInventario: Optional[Union[bool, int, str]] = None
    ubicacion: Optional[str] = None
    numInventario: Optional[str] = None
    numSerieEquipo: Optional[str] = None
    nivelRiesgo: Optional[str] = None
    nomAplicada: Optional[str] = None
    img: Optional[str] = None
    caracteristicas: List[Union[Caracteristica, EntradaSuelta]] = Field(default_factory=list)
    mantPreventivo: List[Union[ActividadMantenimiento, EntradaSuelta]] = Field(default_factory=list)
    mantCorrectivo: List[Union[ActividadMantenimiento, EntradaSuelta]] = Field(default_factory=list)

    @field_validator("caracteristicas", "mantPreventivo", "mantCorrectivo", mode="before")
    @classmethod
    def _null_as_empty(cls, v):
        return [] if v is None else v


class EquipoCreate(EquipoBase):
    usuario_id: UsuarioId = None
    agregadoPor: Optional[str] = None
    fechaAgregado: Optional[str] = None


class EquipoUpdate(EquipoBase):
    # usuario_id es quien edita; los datos del creador no se tocan
    usuario_id: UsuarioId = None
    editadoPor: Optional[str] = None
    fechaModificacion: Optional[str] = None


class Equipo(EquipoBase):
    id: int
    usuario_id: Optional[int] = None
    agregadoPor: Optional[str] = None
    fechaAgregado: Optional[str] = None
    editadoPorId: Optional[int] = None
    editadoPor: Optional[str] = None
    fechaModificacion: Optional[str] = None


class RegistroUsuario(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    idempleado: Optional[str] = None
    rolempleado: Optional[str] = None
    password: Optional[str] = None


class LoginUsuario(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    idempleado: Optional[str] = None
    password: Optional[str] = None
