"""
Almacén de registros: persistencia clave-valor de las cuatro colecciones
(usuarios, máquinas, reportes de producción y de parada) como listas JSON.

Cada guardado reescribe la colección completa; para agregar o editar un
registro hay que leer, modificar y guardar la lista entera. No hay bloqueo:
dos escritores concurrentes sobre la misma colección, gana el último.
"""
import copy
import json
import time

from cnc_reportes.constants import (
    CLAVE_USUARIOS,
    CLAVE_MAQUINAS,
    CLAVE_REPORTES_PRODUCCION,
    CLAVE_REPORTES_PARADA,
    COLECCIONES,
    DEFAULT_USERS,
    DEFAULT_MACHINES,
)
from cnc_reportes.models.almacen import EntradaAlmacen
from cnc_reportes.models.entidades import Usuario, Maquina, ReporteProduccion, ReporteParada

# Colecciones que se siembran en la primera lectura
SEMILLAS = {
    CLAVE_USUARIOS: DEFAULT_USERS,
    CLAVE_MAQUINAS: DEFAULT_MACHINES,
}


def nuevo_id(prefijo: str, existentes=()) -> str:
    """
    Id opaco '<prefijo>-<milisegundos>', p.ej. 'prod-1718000000000'.
    Si ya existe en `existentes` (dos altas en el mismo ms) avanza un ms.
    """
    usados = set(existentes)
    ms = int(time.time() * 1000)
    while f"{prefijo}-{ms}" in usados:
        ms += 1
    return f"{prefijo}-{ms}"


class AlmacenRegistros:
    """Repositorio de colecciones sobre una sesión SQLAlchemy."""

    def __init__(self, session):
        self.session = session

    def _entrada(self, coleccion):
        if coleccion not in COLECCIONES:
            raise ValueError(f"Colección desconocida: {coleccion}")
        # Siempre desde la BD: otra sesión pudo reescribir la colección
        return self.session.get(EntradaAlmacen, coleccion, populate_existing=True)

    def get(self, coleccion) -> list:
        entrada = self._entrada(coleccion)

        if entrada is None:
            semilla = SEMILLAS.get(coleccion)
            if semilla is None:
                return []
            # Bootstrap único: a partir de aquí existe la clave, aunque luego se vacíe
            datos = copy.deepcopy(semilla)
            self.save(coleccion, datos)
            return datos

        return json.loads(entrada.valor) if entrada.valor else []

    def save(self, coleccion, registros) -> None:
        entrada = self._entrada(coleccion)
        valor = json.dumps(list(registros), ensure_ascii=False)

        if entrada is None:
            self.session.add(EntradaAlmacen(clave=coleccion, valor=valor))
        else:
            entrada.valor = valor
        self.session.commit()

    # --- Accesores tipados ---

    def obtener_usuarios(self):
        return [Usuario.from_dict(u) for u in self.get(CLAVE_USUARIOS)]

    def guardar_usuarios(self, usuarios):
        self.save(CLAVE_USUARIOS, [u.to_dict() for u in usuarios])

    def obtener_maquinas(self):
        return [Maquina.from_dict(m) for m in self.get(CLAVE_MAQUINAS)]

    def guardar_maquinas(self, maquinas):
        self.save(CLAVE_MAQUINAS, [m.to_dict() for m in maquinas])

    def obtener_reportes_produccion(self):
        return [ReporteProduccion.from_dict(r) for r in self.get(CLAVE_REPORTES_PRODUCCION)]

    def guardar_reportes_produccion(self, reportes):
        self.save(CLAVE_REPORTES_PRODUCCION, [r.to_dict() for r in reportes])

    def obtener_reportes_parada(self):
        return [ReporteParada.from_dict(r) for r in self.get(CLAVE_REPORTES_PARADA)]

    def guardar_reportes_parada(self, reportes):
        self.save(CLAVE_REPORTES_PARADA, [r.to_dict() for r in reportes])


def obtener_almacen():
    """Almacén ligado a la sesión de la app actual (usar dentro de app_context)."""
    from cnc_reportes.extensions import db
    return AlmacenRegistros(db.session)
