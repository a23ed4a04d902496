"""
Rutas de apoyo al frontend: panel de inicio, menú según rol y opciones de formularios.
"""
from flask import Blueprint, jsonify

from cnc_reportes.constants import VISTAS, OPCIONES_PROCESO_SUPERFICIE
from cnc_reportes.models.entidades import nombre_maquina_de, nombre_usuario_de
from cnc_reportes.services.almacen_service import obtener_almacen
from cnc_reportes.services.sesion_service import requiere_sesion, usuario_actual
from cnc_reportes.utils import handle_errors

panel_bp = Blueprint('panel', __name__)


@panel_bp.route('/panel', methods=['GET'])
@handle_errors
@requiere_sesion
def panel():
    """Resumen de bienvenida: totales del catálogo y rol del usuario."""
    almacen = obtener_almacen()
    usuario = usuario_actual()

    return jsonify({
        'usuario': usuario.full_name,
        'rol': usuario.role.value,
        'total_maquinas': len(almacen.obtener_maquinas()),
        'total_usuarios': len(almacen.obtener_usuarios())
    })


@panel_bp.route('/navegacion', methods=['GET'])
@handle_errors
@requiere_sesion
def navegacion():
    """Vistas del menú lateral visibles para el rol en sesión."""
    rol = usuario_actual().role.value
    return jsonify([
        {'id': v['id'], 'label': v['label']}
        for v in VISTAS if rol in v['roles']
    ])


@panel_bp.route('/opciones', methods=['GET'])
@handle_errors
@requiere_sesion
def opciones():
    """Valores para los selects de los formularios de reporte."""
    almacen = obtener_almacen()
    return jsonify({
        'procesos_superficie': OPCIONES_PROCESO_SUPERFICIE,
        'maquinas': [nombre_maquina_de(m) for m in almacen.obtener_maquinas()],
        'usuarios': [nombre_usuario_de(u) for u in almacen.obtener_usuarios()]
    })
