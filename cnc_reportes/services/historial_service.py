"""
Filtro del historial de reportes. Funciones puras: no leen ni escriben el
almacén, reciben las listas y devuelven una lista nueva ordenada.
"""
from datetime import date

from cnc_reportes.models.entidades import Rol


def _fecha_orden(valor):
    # Fechas ilegibles quedan al final del orden descendente
    try:
        return date.fromisoformat(valor)
    except (TypeError, ValueError):
        return date.min


def _texto(valor):
    # Registros viejos pueden traer números u otros tipos en campos de texto
    return '' if valor is None else str(valor).lower()


def _texto_busqueda_produccion(reporte):
    campos = [
        reporte.project_code,
        reporte.customer_code,
        reporte.item_name,
        reporte.part_name,
        reporte.machine_name,
        reporte.operator,
        reporte.supervisor,
        reporte.programmer,
        reporte.setter,
    ]
    return ' '.join(_texto(c) for c in campos)


def filtrar_reportes_produccion(reportes, usuario, busqueda='', usuario_filtro=''):
    """
    Reportes de producción visibles para `usuario`.

    - Operador: sólo los suyos (operator == su fullName), siempre.
    - Admin: todos, o los del `usuario_filtro` (fullName) si viene informado.
    - `busqueda`: subcadena sin distinguir mayúsculas sobre proyecto, cliente,
      ítem, pieza, máquina y personas.

    Orden: deploymentDate descendente; empates conservan el orden original.
    """
    if usuario.role != Rol.ADMIN:
        resultado = [r for r in reportes if r.operator == usuario.full_name]
    elif usuario_filtro:
        resultado = [r for r in reportes if r.operator == usuario_filtro]
    else:
        resultado = list(reportes)

    if busqueda:
        termino = busqueda.lower()
        resultado = [r for r in resultado if termino in _texto_busqueda_produccion(r)]

    return sorted(resultado, key=lambda r: _fecha_orden(r.deployment_date), reverse=True)


def filtrar_reportes_parada(reportes, busqueda=''):
    """
    Reportes de parada filtrados por máquina o motivo. Sin restricción por
    rol: todos los usuarios ven todas las paradas.
    """
    resultado = list(reportes)

    if busqueda:
        termino = busqueda.lower()
        resultado = [
            r for r in resultado
            if termino in _texto(r.machine_name) or termino in _texto(r.reason)
        ]

    return sorted(resultado, key=lambda r: _fecha_orden(r.downtime_date), reverse=True)
