# Importar todos los modelos para facilitar acceso
from cnc_reportes.models.almacen import EntradaAlmacen
from cnc_reportes.models.entidades import (
    Rol,
    Usuario,
    Maquina,
    ReporteProduccion,
    ReporteParada,
)
