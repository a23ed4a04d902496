"""
Motor de reportes: campos derivados, validación, mapeo a la hoja de Google
y orquestación de envío/actualización.

Regla de orden: el almacén local sólo se escribe después de que el webhook
confirma el envío. Si el webhook falla, la colección queda intacta.
"""
import math
import re
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from cnc_reportes.constants import (
    PATRON_HORA,
    HOJA_PRODUCCION,
    HOJA_PARADA,
    OPCIONES_PROCESO_SUPERFICIE,
)
from cnc_reportes.models.entidades import (
    ReporteProduccion,
    ReporteParada,
    maquina_por_defecto,
    nombre_maquina_de,
    nombre_usuario_de,
)
from cnc_reportes.services.almacen_service import nuevo_id
from cnc_reportes.utils.error_utils import NotFoundError, log_operation

_RE_HORA = re.compile(PATRON_HORA)

# Campos cuyo cambio obliga a recalcular el tiempo por pieza
CAMPOS_TIEMPO = ('start_time', 'end_time', 'actual_qty')

# Nombre JSON -> atributo, para aplicar cambios que llegan del formulario
CAMPOS_FORMULARIO = {
    'deploymentDate': 'deployment_date',
    'projectCode': 'project_code',
    'customerCode': 'customer_code',
    'itemName': 'item_name',
    'partName': 'part_name',
    'machineName': 'machine_name',
    'plannedQty': 'planned_qty',
    'actualQty': 'actual_qty',
    'ngQty': 'ng_qty',
    'startTime': 'start_time',
    'endTime': 'end_time',
    'surfaceProcess': 'surface_process',
    'otherProcess': 'other_process',
    'operator': 'operator',
    'supervisor': 'supervisor',
    'programmer': 'programmer',
    'setter': 'setter',
    'estimatedTimePerPiece': 'estimated_time_per_piece',
}

# Campos de texto libre: si vienen informados deben ser str
CAMPOS_TEXTO_PRODUCCION = {
    'projectCode': 'project_code',
    'customerCode': 'customer_code',
    'itemName': 'item_name',
    'partName': 'part_name',
    'machineName': 'machine_name',
    'otherProcess': 'other_process',
    'operator': 'operator',
    'supervisor': 'supervisor',
    'programmer': 'programmer',
    'setter': 'setter',
}

CAMPOS_TEXTO_PARADA = {
    'machineName': 'machine_name',
    'reason': 'reason',
}


@dataclass
class ResultadoEnvio:
    success: bool
    message: str
    codigo: str = 'OK'
    reporte: Optional[object] = None


# =========================================================================
# CAMPOS DERIVADOS
# =========================================================================

def derivar_codigo_cliente(project_code) -> str:
    """Código de cliente = primeros 2 caracteres del proyecto, en mayúsculas."""
    return (project_code or '')[:2].upper()


def hora_valida(valor) -> bool:
    return isinstance(valor, str) and bool(_RE_HORA.match(valor))


def _minutos(hora: str) -> int:
    horas, minutos = hora.split(':')
    return int(horas) * 60 + int(minutos)


def redondear_2(valor: float) -> float:
    """Redondeo a 2 decimales, mitad hacia arriba."""
    return math.floor(valor * 100 + 0.5) / 100


def calcular_tiempo_por_pieza(start_time, end_time, actual_qty) -> float:
    """
    Minutos por pieza = (fin - inicio) / cantidad real, a 2 decimales.
    Devuelve 0 si falta algún dato, la cantidad no es positiva o el fin no
    es posterior al inicio (no contempla turnos que cruzan medianoche).
    """
    if not (hora_valida(start_time) and hora_valida(end_time)):
        return 0.0
    if not isinstance(actual_qty, (int, float)) or isinstance(actual_qty, bool) or actual_qty <= 0:
        return 0.0

    transcurrido = _minutos(end_time) - _minutos(start_time)
    if transcurrido <= 0:
        return 0.0

    return redondear_2(transcurrido / actual_qty)


def aplicar_cambio(reporte: ReporteProduccion, campo: str, valor) -> ReporteProduccion:
    """
    Aplica un cambio de campo del formulario y recalcula los derivados.
    `campo` usa el nombre JSON (p.ej. 'projectCode').
    """
    if campo not in CAMPOS_FORMULARIO:
        raise ValueError(f"Campo desconocido: {campo}")

    atributo = CAMPOS_FORMULARIO[campo]
    if atributo in ('planned_qty', 'actual_qty', 'ng_qty'):
        valor = _numero_formulario(valor)
    elif campo in CAMPOS_TEXTO_PRODUCCION and not isinstance(valor, (str, type(None))):
        raise ValueError(f"{campo}: debe ser texto")

    nuevo = replace(reporte, **{atributo: valor})

    if atributo == 'project_code':
        nuevo.customer_code = derivar_codigo_cliente(valor)
    if atributo in CAMPOS_TIEMPO:
        nuevo.estimated_time_per_piece = calcular_tiempo_por_pieza(
            nuevo.start_time, nuevo.end_time, nuevo.actual_qty
        )
    return nuevo


def _numero_formulario(valor):
    # Un input numérico vacío equivale a 0
    if valor in (None, ''):
        return 0
    try:
        numero = float(valor)
    except (TypeError, ValueError):
        raise ValueError(f"Valor numérico inválido: {valor}")
    return int(numero) if numero.is_integer() else numero


def nuevo_reporte_produccion(usuario, almacen) -> ReporteProduccion:
    """Estado inicial del formulario para el usuario en sesión."""
    maquina = maquina_por_defecto(usuario, almacen.obtener_maquinas())
    return ReporteProduccion(
        deployment_date=date.today().isoformat(),
        machine_name=nombre_maquina_de(maquina) if maquina else '',
        operator=nombre_usuario_de(usuario),
    )


def nuevo_reporte_parada() -> ReporteParada:
    return ReporteParada(downtime_date=date.today().isoformat())


# =========================================================================
# VALIDACIÓN
# =========================================================================

def _validar_fecha(valor, campo):
    try:
        return date.fromisoformat(valor)
    except (TypeError, ValueError):
        raise ValueError(f"{campo}: fecha inválida '{valor}' (formato YYYY-MM-DD)")


def _validar_cantidad(valor, campo):
    if isinstance(valor, bool):
        raise ValueError(f"{campo}: debe ser un entero no negativo")
    if isinstance(valor, float) and valor.is_integer():
        valor = int(valor)
    if isinstance(valor, str) and valor.strip().isdigit():
        valor = int(valor.strip())
    if not isinstance(valor, int) or valor < 0:
        raise ValueError(f"{campo}: debe ser un entero no negativo")
    return valor


def _validar_horas(start_time, end_time):
    for campo, valor in (('startTime', start_time), ('endTime', end_time)):
        if not hora_valida(valor):
            raise ValueError(f"{campo}: hora inválida '{valor}' (formato HH:MM 24h)")


def _faltantes(valores: dict):
    return [campo for campo, valor in valores.items() if valor in (None, '')]


def _validar_textos(reporte, campos: dict):
    for campo, atributo in campos.items():
        valor = getattr(reporte, atributo)
        if valor is not None and not isinstance(valor, str):
            raise ValueError(f"{campo}: debe ser texto")


def validar_reporte_produccion(reporte: ReporteProduccion) -> ReporteProduccion:
    """Valida y normaliza (cantidades a int). Lanza ValueError."""
    faltantes = _faltantes({
        'deploymentDate': reporte.deployment_date,
        'projectCode': reporte.project_code,
        'itemName': reporte.item_name,
        'partName': reporte.part_name,
        'machineName': reporte.machine_name,
        'startTime': reporte.start_time,
        'endTime': reporte.end_time,
        'operator': reporte.operator,
        'supervisor': reporte.supervisor,
    })
    if faltantes:
        raise ValueError(f"Campos requeridos faltantes: {', '.join(faltantes)}")

    _validar_textos(reporte, CAMPOS_TEXTO_PRODUCCION)
    _validar_fecha(reporte.deployment_date, 'deploymentDate')
    _validar_horas(reporte.start_time, reporte.end_time)

    if reporte.surface_process not in OPCIONES_PROCESO_SUPERFICIE:
        raise ValueError(f"surfaceProcess: opción inválida '{reporte.surface_process}'")

    try:
        tiempo = float(reporte.estimated_time_per_piece or 0)
    except (TypeError, ValueError):
        raise ValueError("estimatedTimePerPiece: debe ser numérico")

    return replace(
        reporte,
        planned_qty=_validar_cantidad(reporte.planned_qty, 'plannedQty'),
        actual_qty=_validar_cantidad(reporte.actual_qty, 'actualQty'),
        ng_qty=_validar_cantidad(reporte.ng_qty, 'ngQty'),
        estimated_time_per_piece=tiempo,
    )


def validar_reporte_parada(reporte: ReporteParada) -> ReporteParada:
    faltantes = _faltantes({
        'downtimeDate': reporte.downtime_date,
        'machineName': reporte.machine_name,
        'startTime': reporte.start_time,
        'endTime': reporte.end_time,
        'reason': reporte.reason,
    })
    if faltantes:
        raise ValueError(f"Campos requeridos faltantes: {', '.join(faltantes)}")

    _validar_textos(reporte, CAMPOS_TEXTO_PARADA)
    _validar_fecha(reporte.downtime_date, 'downtimeDate')
    _validar_horas(reporte.start_time, reporte.end_time)
    return reporte


# =========================================================================
# MAPEO A LA HOJA DE GOOGLE
# =========================================================================
# Las etiquetas son los encabezados de columna de la hoja; no traducir.
# programmer/setter no se envían (sólo quedan en el almacén local).

def mapear_produccion_para_hoja(reporte: ReporteProduccion) -> dict:
    fecha = date.fromisoformat(reporte.deployment_date)
    return {
        "Ngày triển khai": fecha.day,
        "Tháng Triển Khai": fecha.month,
        "Năm Triển Khai": fecha.year,
        "Mã Dự Án": reporte.project_code,
        "Mã KH": reporte.customer_code,
        "Mục Số - Tên hạng mục": reporte.item_name,
        "Tên chi tiết gia công": reporte.part_name,
        "Tên Máy Thực Hiện": reporte.machine_name,
        "Số lượng kế hoạch (PCS)": reporte.planned_qty,
        "Số lượng thực tế (PCS)": reporte.actual_qty,
        "Số lượng chưa hoàn thành (PCS)": reporte.planned_qty - reporte.actual_qty,
        "Số lượng hàng NG": reporte.ng_qty,
        "Thời gian bắt đầu (giờ/phút)": reporte.start_time,
        "Thời gian kết thúc (giờ/phút)": reporte.end_time,
        "Công đoạn Gia Công Bề Mặt": reporte.surface_process,
        "Công đoạn khác": reporte.other_process,
        "Người thực hiện": reporte.operator,
        "Người Giám Sát": reporte.supervisor,
        "Thời gian dự kiến theo lập trình (phút/Sp)": reporte.estimated_time_per_piece,
    }


def mapear_parada_para_hoja(reporte: ReporteParada) -> dict:
    fecha = date.fromisoformat(reporte.downtime_date)
    return {
        "Ngày máy dừng hoạt động": fecha.day,
        "Tháng Máy Dừng": fecha.month,
        "Tên Máy": reporte.machine_name,
        "Thời gian máy bắt đầu dừng": reporte.start_time,
        "Thời gian máy hoạt động trở lại": reporte.end_time,
        "Nguyên Nhân Máy Dừng": reporte.reason,
    }


# =========================================================================
# ENVÍO Y ACTUALIZACIÓN
# =========================================================================

def _con_derivados(reporte: ReporteProduccion) -> ReporteProduccion:
    return replace(
        reporte,
        customer_code=derivar_codigo_cliente(reporte.project_code),
        estimated_time_per_piece=calcular_tiempo_por_pieza(
            reporte.start_time, reporte.end_time, reporte.actual_qty
        ),
    )


def enviar_reporte_produccion(reporte: ReporteProduccion, almacen, cliente) -> ResultadoEnvio:
    """
    Envía un reporte nuevo a la hoja y, sólo si fue aceptado, lo agrega al
    almacén con un id 'prod-<ms>'.
    """
    reporte = _con_derivados(validar_reporte_produccion(replace(reporte, id=None)))

    resultado = cliente.post(HOJA_PRODUCCION, mapear_produccion_para_hoja(reporte))
    if not resultado.success:
        log_operation('enviar_reporte_produccion', 'error',
                      proyecto=reporte.project_code, motivo=resultado.codigo)
        return ResultadoEnvio(False, resultado.message, resultado.codigo)

    reportes = almacen.obtener_reportes_produccion()
    guardado = replace(reporte, id=nuevo_id('prod', (r.id for r in reportes)))
    reportes.append(guardado)
    almacen.guardar_reportes_produccion(reportes)

    log_operation('enviar_reporte_produccion', reporte_id=guardado.id, operador=guardado.operator)
    return ResultadoEnvio(True, resultado.message, resultado.codigo, guardado)


def actualizar_reporte_produccion(reporte: ReporteProduccion, almacen, cliente) -> ResultadoEnvio:
    """
    Reenvía un reporte existente a la hoja y reemplaza el registro con el
    mismo id. Los derivados se recalculan sólo si cambiaron sus entradas;
    si no, se respeta el valor editado a mano.
    """
    if not reporte.id:
        raise ValueError("El reporte a actualizar debe tener id")

    existente = next((r for r in almacen.obtener_reportes_produccion() if r.id == reporte.id), None)
    if existente is None:
        raise NotFoundError(f"Reporte {reporte.id} no encontrado")

    reporte = validar_reporte_produccion(reporte)
    if reporte.project_code != existente.project_code:
        reporte.customer_code = derivar_codigo_cliente(reporte.project_code)
    if any(getattr(reporte, c) != getattr(existente, c) for c in CAMPOS_TIEMPO):
        reporte.estimated_time_per_piece = calcular_tiempo_por_pieza(
            reporte.start_time, reporte.end_time, reporte.actual_qty
        )

    resultado = cliente.post(HOJA_PRODUCCION, mapear_produccion_para_hoja(reporte))
    if not resultado.success:
        log_operation('actualizar_reporte_produccion', 'error',
                      reporte_id=reporte.id, motivo=resultado.codigo)
        return ResultadoEnvio(False, resultado.message, resultado.codigo)

    # Se relee: el id es la única clave de reemplazo
    reportes = [reporte if r.id == reporte.id else r for r in almacen.obtener_reportes_produccion()]
    almacen.guardar_reportes_produccion(reportes)

    log_operation('actualizar_reporte_produccion', reporte_id=reporte.id)
    return ResultadoEnvio(True, '¡Reporte actualizado correctamente!', resultado.codigo, reporte)


def enviar_reporte_parada(reporte: ReporteParada, almacen, cliente) -> ResultadoEnvio:
    """Igual que producción, con id 'down-<ms>'. Los reportes de parada no se editan."""
    reporte = validar_reporte_parada(replace(reporte, id=None))

    resultado = cliente.post(HOJA_PARADA, mapear_parada_para_hoja(reporte))
    if not resultado.success:
        log_operation('enviar_reporte_parada', 'error',
                      maquina=reporte.machine_name, motivo=resultado.codigo)
        return ResultadoEnvio(False, resultado.message, resultado.codigo)

    reportes = almacen.obtener_reportes_parada()
    guardado = replace(reporte, id=nuevo_id('down', (r.id for r in reportes)))
    reportes.append(guardado)
    almacen.guardar_reportes_parada(reportes)

    log_operation('enviar_reporte_parada', reporte_id=guardado.id, maquina=guardado.machine_name)
    return ResultadoEnvio(True, resultado.message, resultado.codigo, guardado)
