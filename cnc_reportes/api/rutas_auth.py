"""
Rutas de sesión: login, logout y usuario actual.
"""
from flask import Blueprint

from cnc_reportes.services.almacen_service import obtener_almacen
from cnc_reportes.services.sesion_service import (
    autenticar,
    iniciar_sesion,
    cerrar_sesion,
    usuario_actual,
    requiere_sesion,
)
from cnc_reportes.utils import APIError, ErrorCodes, handle_errors, json_body, success_response, log_operation, validate_required

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
@handle_errors
def login():
    """Valida usuario/contraseña y guarda el usuario (sin contraseña) en la sesión."""
    data = json_body()
    validate_required(data, ['username', 'password'])

    usuario = autenticar(obtener_almacen().obtener_usuarios(), data['username'], data['password'])
    if usuario is None:
        log_operation('login', 'warning', username=data['username'])
        code, status = ErrorCodes.UNAUTHORIZED
        raise APIError('Usuario o contraseña incorrectos.', status, code)

    iniciar_sesion(usuario)
    log_operation('login', username=usuario.username)
    return success_response(usuario.to_dict(incluir_password=False))


@auth_bp.route('/logout', methods=['POST'])
@handle_errors
def logout():
    cerrar_sesion()
    return success_response(message='Sesión cerrada')


@auth_bp.route('/sesion', methods=['GET'])
@handle_errors
@requiere_sesion
def sesion():
    return success_response(usuario_actual().to_dict(incluir_password=False))
