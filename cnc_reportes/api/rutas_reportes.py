"""
Rutas API de reportes de producción y de parada, e historial.
"""
from flask import Blueprint, jsonify, request, send_file

from cnc_reportes.models.entidades import ReporteProduccion, ReporteParada
from cnc_reportes.services import reportes_service
from cnc_reportes.services.almacen_service import obtener_almacen
from cnc_reportes.services.excel_service import generar_historial_excel
from cnc_reportes.services.historial_service import filtrar_reportes_produccion, filtrar_reportes_parada
from cnc_reportes.services.sesion_service import requiere_sesion, usuario_actual
from cnc_reportes.services.sync_service import obtener_cliente_sync
from cnc_reportes.utils import APIError, ErrorCodes, handle_errors, json_body, success_response, log_request

reportes_bp = Blueprint('reportes', __name__)


def _respuesta_envio(resultado, status_ok=200):
    """Éxito -> {success, message, data}; fallo del webhook -> 502 con el mensaje tal cual."""
    if resultado.success:
        return success_response(resultado.reporte.to_dict(), resultado.message, status_ok)

    _, status = ErrorCodes.SYNC_FAILED
    return jsonify({
        'success': False,
        'message': resultado.message,
        'code': resultado.codigo
    }), status


# --- Producción ---

@reportes_bp.route('/reportes/produccion/nuevo', methods=['GET'])
@handle_errors
@requiere_sesion
def nuevo_reporte_produccion():
    """Formulario inicial: fecha de hoy, operador en sesión y su máquina por defecto."""
    reporte = reportes_service.nuevo_reporte_produccion(usuario_actual(), obtener_almacen())
    return jsonify(reporte.to_dict())


@reportes_bp.route('/reportes/produccion/derivar', methods=['POST'])
@handle_errors
@requiere_sesion
def derivar_campos():
    """
    Aplica el cambio de un campo del formulario y devuelve el reporte con
    customerCode y estimatedTimePerPiece recalculados.
    Body: {"reporte": {...}, "campo": "startTime", "valor": "08:00"}
    """
    data = json_body()
    actual = data.get('reporte') or {}
    if not isinstance(actual, dict):
        code, status = ErrorCodes.VALIDATION_ERROR
        raise APIError("'reporte' debe ser un objeto JSON", status, code)

    reporte = ReporteProduccion.from_dict(actual)
    reporte = reportes_service.aplicar_cambio(reporte, data['campo'], data.get('valor'))
    return jsonify(reporte.to_dict())


@reportes_bp.route('/reportes/produccion', methods=['POST'])
@handle_errors
@requiere_sesion
def enviar_reporte_produccion():
    data = json_body()
    log_request('enviar_reporte_produccion', usuario=usuario_actual().username)

    resultado = reportes_service.enviar_reporte_produccion(
        ReporteProduccion.from_dict(data), obtener_almacen(), obtener_cliente_sync()
    )
    return _respuesta_envio(resultado, 201)


@reportes_bp.route('/reportes/produccion/<reporte_id>', methods=['PUT'])
@handle_errors
@requiere_sesion
def actualizar_reporte_produccion(reporte_id):
    data = json_body()
    log_request('actualizar_reporte_produccion', usuario=usuario_actual().username, reporte_id=reporte_id)

    # El id de la URL manda sobre el del body
    reporte = ReporteProduccion.from_dict({**data, 'id': reporte_id})
    resultado = reportes_service.actualizar_reporte_produccion(
        reporte, obtener_almacen(), obtener_cliente_sync()
    )
    return _respuesta_envio(resultado)


# --- Paradas ---

@reportes_bp.route('/reportes/parada/nuevo', methods=['GET'])
@handle_errors
@requiere_sesion
def nuevo_reporte_parada():
    return jsonify(reportes_service.nuevo_reporte_parada().to_dict())


@reportes_bp.route('/reportes/parada', methods=['POST'])
@handle_errors
@requiere_sesion
def enviar_reporte_parada():
    data = json_body()
    log_request('enviar_reporte_parada', usuario=usuario_actual().username)

    resultado = reportes_service.enviar_reporte_parada(
        ReporteParada.from_dict(data), obtener_almacen(), obtener_cliente_sync()
    )
    return _respuesta_envio(resultado, 201)


# --- Historial ---

def _historial_filtrado():
    """
    Query params:
        - q: término de búsqueda
        - usuario: fullName del operador (sólo lo aplica un admin)
    """
    almacen = obtener_almacen()
    busqueda = request.args.get('q', '')
    usuario_filtro = request.args.get('usuario', '')

    produccion = filtrar_reportes_produccion(
        almacen.obtener_reportes_produccion(), usuario_actual(), busqueda, usuario_filtro
    )
    paradas = filtrar_reportes_parada(almacen.obtener_reportes_parada(), busqueda)
    return produccion, paradas


@reportes_bp.route('/historial', methods=['GET'])
@handle_errors
@requiere_sesion
def historial():
    produccion, paradas = _historial_filtrado()
    return jsonify({
        'produccion': [r.to_dict() for r in produccion],
        'paradas': [r.to_dict() for r in paradas]
    })


@reportes_bp.route('/historial/excel', methods=['GET'])
@handle_errors
@requiere_sesion
def descargar_historial_excel():
    """Descarga el historial filtrado como Excel (hojas Produccion y Paradas)."""
    produccion, paradas = _historial_filtrado()
    excel_buffer = generar_historial_excel(produccion, paradas)

    return send_file(
        excel_buffer,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name='historial_reportes.xlsx'
    )
