"""
Tests del decorator handle_errors: cada excepción con su status.
"""
import pytest

from cnc_reportes.utils import NotFoundError, handle_errors


def _ruta_que_lanza(excepcion):
    @handle_errors
    def ruta():
        raise excepcion
    return ruta


@pytest.mark.parametrize('excepcion, status, code', [
    (NotFoundError('Reporte prod-1 no encontrado'), 404, 'NOT_FOUND'),
    (ValueError('fecha inválida'), 400, 'VALIDATION_ERROR'),
    (KeyError('campo'), 400, 'MISSING_FIELD'),
    # Un IndexError es un bug, no un registro inexistente
    (IndexError('list index out of range'), 500, 'SERVER_ERROR'),
])
def test_mapeo_de_excepciones(app, excepcion, status, code):
    with app.test_request_context():
        response, status_code = _ruta_que_lanza(excepcion)()

    assert status_code == status
    assert response.get_json()['code'] == code
