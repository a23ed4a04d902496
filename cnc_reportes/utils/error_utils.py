"""
Errores de API, respuestas JSON estandarizadas y logging estructurado del backend.
"""
from flask import jsonify, current_app, request
from functools import wraps
import traceback
import logging
from datetime import datetime, timezone

logger = logging.getLogger('cnc_reportes')


def _ahora_iso():
    return datetime.now(timezone.utc).isoformat()


class APIError(Exception):
    """Error con código HTTP y código interno, devuelto tal cual al cliente."""

    def __init__(self, message, status_code=400, code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def to_dict(self):
        rv = {
            'error': self.message,
            'status': self.status_code,
            'timestamp': _ahora_iso()
        }
        if self.code:
            rv['code'] = self.code
        return rv


class NotFoundError(LookupError):
    """Registro (usuario, máquina o reporte) inexistente en su colección."""


class ErrorCodes:
    """(código interno, status HTTP)"""
    VALIDATION_ERROR = ('VALIDATION_ERROR', 400)
    NOT_FOUND = ('NOT_FOUND', 404)
    DUPLICATE = ('DUPLICATE', 409)
    SERVER_ERROR = ('SERVER_ERROR', 500)
    UNAUTHORIZED = ('UNAUTHORIZED', 401)
    SYNC_FAILED = ('SYNC_FAILED', 502)


def error_response(message, status_code=400, code=None, details=None):
    """
    Respuesta de error: {error, status, timestamp, code?, details?}.
    `details` sólo se incluye con la app en modo debug.
    """
    response = {
        'error': message,
        'status': status_code,
        'timestamp': _ahora_iso()
    }

    if code:
        response['code'] = code

    if details and current_app.debug:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data=None, message=None, status_code=200):
    response = {'success': True}

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    return jsonify(response), status_code


def handle_errors(f):
    """
    Decorator de rutas: convierte excepciones en respuestas JSON.

        APIError      -> su status
        ValueError    -> 400 VALIDATION_ERROR
        KeyError      -> 400 MISSING_FIELD
        NotFoundError -> 404 NOT_FOUND
        otra          -> 500 SERVER_ERROR
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except APIError as e:
            logger.warning(f"APIError in {f.__name__}: {e.message}")
            return jsonify(e.to_dict()), e.status_code
        except ValueError as e:
            logger.warning(f"ValueError in {f.__name__}: {str(e)}")
            code, status = ErrorCodes.VALIDATION_ERROR
            return error_response(str(e), status, code)
        except KeyError as e:
            logger.warning(f"KeyError in {f.__name__}: Missing key {e}")
            return error_response(f"Campo requerido faltante: {e}", 400, 'MISSING_FIELD')
        except NotFoundError as e:
            logger.warning(f"NotFoundError in {f.__name__}: {str(e)}")
            code, status = ErrorCodes.NOT_FOUND
            return error_response(str(e), status, code)
        except Exception as e:
            logger.error(f"Unhandled error in {f.__name__}: {str(e)}")
            logger.error(traceback.format_exc())

            code, status = ErrorCodes.SERVER_ERROR
            return error_response(
                "Error interno del servidor. Por favor, intente más tarde.",
                status,
                code,
                details=str(e) if current_app.debug else None
            )
    return decorated_function


def log_request(route_name, **context):
    """Registra una petición entrante con su contexto (usuario, reporte_id, ...)."""
    log_data = {
        'route': route_name,
        'timestamp': _ahora_iso(),
        **context
    }
    logger.info(f"REQUEST: {log_data}")


def log_operation(operation, status='success', **context):
    """
    Registra el resultado de una operación. `status` elige el nivel:
    'error' -> error, 'warning' -> warning, cualquier otro -> info.
    """
    log_data = {
        'operation': operation,
        'status': status,
        'timestamp': _ahora_iso(),
        **context
    }

    if status == 'error':
        logger.error(f"OPERATION: {log_data}")
    elif status == 'warning':
        logger.warning(f"OPERATION: {log_data}")
    else:
        logger.info(f"OPERATION: {log_data}")


def json_body():
    """
    Body JSON de la petición como dict. Sin body (o JSON inválido) -> {}.
    Un array o un escalar se rechaza con 400.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        code, status = ErrorCodes.VALIDATION_ERROR
        raise APIError('El body debe ser un objeto JSON', status, code)
    return data


def validate_required(data, required_fields):
    """
    Valida que los campos requeridos estén presentes y no vacíos.

    Raises:
        APIError: 400 VALIDATION_ERROR con la lista de faltantes
    """
    missing = [f for f in required_fields if f not in data or data[f] is None or data[f] == '']
    if missing:
        code, status = ErrorCodes.VALIDATION_ERROR
        raise APIError(
            f"Campos requeridos faltantes: {', '.join(missing)}",
            status,
            code
        )
