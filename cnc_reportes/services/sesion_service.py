"""
Login y usuario en sesión. Prototipo: las contraseñas se comparan en texto plano.
"""
from functools import wraps

from flask import session

from cnc_reportes.models.entidades import Usuario
from cnc_reportes.utils.error_utils import APIError, ErrorCodes

CLAVE_SESION = 'usuario_actual'


def autenticar(usuarios, username, password):
    """Devuelve el usuario (sin contraseña) si las credenciales coinciden, si no None."""
    usuario = next(
        (u for u in usuarios if u.username == username and u.password == password),
        None
    )
    return usuario.sin_password() if usuario else None


def iniciar_sesion(usuario: Usuario):
    session[CLAVE_SESION] = usuario.to_dict(incluir_password=False)


def cerrar_sesion():
    session.pop(CLAVE_SESION, None)


def usuario_actual():
    data = session.get(CLAVE_SESION)
    return Usuario.from_dict(data) if data else None


def requiere_sesion(f):
    """Rechaza con 401 si no hay usuario en sesión. Usar debajo de @handle_errors."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if usuario_actual() is None:
            code, status = ErrorCodes.UNAUTHORIZED
            raise APIError('Debe iniciar sesión', status, code)
        return f(*args, **kwargs)
    return decorated_function
