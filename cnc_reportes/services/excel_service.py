"""
Servicio de generación de Excel para el historial de reportes.
Arma un libro con una hoja de producción y otra de paradas, con las mismas
filas (ya filtradas y ordenadas) que muestra la vista de historial.
"""
import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from io import BytesIO

COLUMNAS_PRODUCCION = [
    ('Fecha', 'deployment_date'),
    ('Proyecto', 'project_code'),
    ('Cliente', 'customer_code'),
    ('Ítem', 'item_name'),
    ('Pieza', 'part_name'),
    ('Máquina', 'machine_name'),
    ('Plan (PCS)', 'planned_qty'),
    ('Real (PCS)', 'actual_qty'),
    ('NG', 'ng_qty'),
    ('Inicio', 'start_time'),
    ('Fin', 'end_time'),
    ('Proceso superficie', 'surface_process'),
    ('Otro proceso', 'other_process'),
    ('Operador', 'operator'),
    ('Supervisor', 'supervisor'),
    ('Programador', 'programmer'),
    ('Preparador', 'setter'),
    ('Min/pieza', 'estimated_time_per_piece'),
]

COLUMNAS_PARADA = [
    ('Fecha', 'downtime_date'),
    ('Máquina', 'machine_name'),
    ('Inicio parada', 'start_time'),
    ('Reinicio', 'end_time'),
    ('Motivo', 'reason'),
]


def generar_historial_excel(reportes_produccion, reportes_parada) -> BytesIO:
    """
    Genera el Excel del historial.

    Args:
        reportes_produccion: lista de ReporteProduccion
        reportes_parada: lista de ReporteParada

    Returns:
        BytesIO: Buffer con el archivo Excel listo para descarga
    """
    wb = openpyxl.Workbook()

    ws_prod = wb.active
    ws_prod.title = 'Produccion'
    _llenar_hoja(ws_prod, COLUMNAS_PRODUCCION, reportes_produccion)

    ws_parada = wb.create_sheet('Paradas')
    _llenar_hoja(ws_parada, COLUMNAS_PARADA, reportes_parada)

    # =========================================================================
    # GUARDAR A BUFFER
    # =========================================================================
    output = BytesIO()
    wb.save(output)
    output.seek(0)

    return output


def _llenar_hoja(ws, columnas, reportes):
    """Encabezado en negrita en la fila 1 y un reporte por fila desde la 2."""
    for col, (titulo, _) in enumerate(columnas, start=1):
        celda = ws.cell(row=1, column=col, value=titulo)
        celda.font = Font(bold=True)
        ws.column_dimensions[get_column_letter(col)].width = max(12, len(titulo) + 2)

    for fila, reporte in enumerate(reportes, start=2):
        for col, (_, atributo) in enumerate(columnas, start=1):
            ws.cell(row=fila, column=col, value=getattr(reporte, atributo))

    ws.freeze_panes = 'A2'
