"""
Rutas API para el catálogo de usuarios y máquinas.
La restricción a administradores es sólo de interfaz (ver /api/navegacion).
"""
from flask import Blueprint, jsonify

from cnc_reportes.services import catalogo_service
from cnc_reportes.services.almacen_service import obtener_almacen
from cnc_reportes.services.sesion_service import requiere_sesion
from cnc_reportes.utils import handle_errors, json_body, success_response

catalogo_bp = Blueprint('catalogo', __name__)


# --- Usuarios ---

@catalogo_bp.route('/usuarios', methods=['GET'])
@handle_errors
@requiere_sesion
def listar_usuarios():
    """Lista usuarios con el nombre de su máquina por defecto. Nunca incluye contraseñas."""
    almacen = obtener_almacen()
    maquinas = {m.id: m.name for m in almacen.obtener_maquinas()}

    return jsonify([{
        **u.to_dict(incluir_password=False),
        'defaultMachineName': maquinas.get(u.default_machine_id)
    } for u in almacen.obtener_usuarios()])


@catalogo_bp.route('/usuarios', methods=['POST'])
@handle_errors
@requiere_sesion
def crear_usuario():
    data = json_body()
    usuario = catalogo_service.crear_usuario(obtener_almacen(), data)
    return success_response(usuario.to_dict(incluir_password=False), 'Usuario creado', 201)


@catalogo_bp.route('/usuarios/<usuario_id>', methods=['PUT'])
@handle_errors
@requiere_sesion
def editar_usuario(usuario_id):
    data = json_body()
    usuario = catalogo_service.editar_usuario(obtener_almacen(), usuario_id, data)
    return success_response(usuario.to_dict(incluir_password=False), 'Usuario actualizado')


@catalogo_bp.route('/usuarios/<usuario_id>', methods=['DELETE'])
@handle_errors
@requiere_sesion
def eliminar_usuario(usuario_id):
    catalogo_service.eliminar_usuario(obtener_almacen(), usuario_id)
    return success_response(message='Usuario eliminado')


# --- Máquinas ---

@catalogo_bp.route('/maquinas', methods=['GET'])
@handle_errors
@requiere_sesion
def listar_maquinas():
    return jsonify([m.to_dict() for m in obtener_almacen().obtener_maquinas()])


@catalogo_bp.route('/maquinas', methods=['POST'])
@handle_errors
@requiere_sesion
def crear_maquina():
    data = json_body()
    maquina = catalogo_service.crear_maquina(obtener_almacen(), data)
    return success_response(maquina.to_dict(), 'Máquina creada', 201)


@catalogo_bp.route('/maquinas/<maquina_id>', methods=['PUT'])
@handle_errors
@requiere_sesion
def editar_maquina(maquina_id):
    data = json_body()
    maquina = catalogo_service.editar_maquina(obtener_almacen(), maquina_id, data)
    return success_response(maquina.to_dict(), 'Máquina actualizada')


@catalogo_bp.route('/maquinas/<maquina_id>', methods=['DELETE'])
@handle_errors
@requiere_sesion
def eliminar_maquina(maquina_id):
    catalogo_service.eliminar_maquina(obtener_almacen(), maquina_id)
    return success_response(message='Máquina eliminada')
