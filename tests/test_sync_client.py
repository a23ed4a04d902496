"""
Tests del cliente del webhook de Google Sheets. requests.post se simula.
"""
import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import patch

import pytest
import requests

from cnc_reportes.config import WEBHOOK_PLACEHOLDER
from cnc_reportes.services.sync_service import (
    ClienteSincronizacion,
    endpoint_configurado,
    CONFIGURACION,
    TIEMPO_AGOTADO,
    TRANSPORTE,
    SERVIDOR,
    OK,
)
from tests.conftest import WEBHOOK_TEST_URL, respuesta_webhook

POST = 'cnc_reportes.services.sync_service.requests.post'


@pytest.fixture
def cliente():
    return ClienteSincronizacion(WEBHOOK_TEST_URL)


def test_envio_exitoso(cliente):
    with patch(POST, return_value=respuesta_webhook()) as mock_post:
        resultado = cliente.post('Production', {'Mã Dự Án': 'ABC123'})

    assert resultado.success is True
    assert resultado.codigo == OK

    args, kwargs = mock_post.call_args
    assert args[0] == WEBHOOK_TEST_URL
    assert kwargs['json'] == {'sheetName': 'Production', 'data': {'Mã Dự Án': 'ABC123'}}
    assert kwargs['timeout'] == (15, 15)
    assert kwargs['stream'] is True


@pytest.mark.parametrize('url', [None, '', WEBHOOK_PLACEHOLDER])
def test_endpoint_no_configurado_no_hace_red(url):
    cliente = ClienteSincronizacion(url)
    with patch(POST) as mock_post:
        resultado = cliente.post('Production', {})

    assert resultado.success is False
    assert resultado.codigo == CONFIGURACION
    mock_post.assert_not_called()


def test_configuracion_se_revisa_en_cada_llamada(cliente):
    with patch(POST, return_value=respuesta_webhook()):
        assert cliente.post('Downtime', {}).success is True

        cliente.url = WEBHOOK_PLACEHOLDER
        assert cliente.post('Downtime', {}).codigo == CONFIGURACION

    assert endpoint_configurado(WEBHOOK_TEST_URL)


def test_tiempo_agotado(cliente):
    with patch(POST, side_effect=requests.Timeout('read timed out')):
        resultado = cliente.post('Production', {})

    assert resultado.success is False
    assert resultado.codigo == TIEMPO_AGOTADO


def test_error_de_conexion(cliente):
    with patch(POST, side_effect=requests.ConnectionError('no route to host')):
        resultado = cliente.post('Production', {})

    assert resultado.success is False
    assert resultado.codigo == TRANSPORTE
    assert 'webhook' in resultado.message


def test_otro_error_de_requests(cliente):
    with patch(POST, side_effect=requests.exceptions.InvalidURL('mala url')):
        resultado = cliente.post('Production', {})

    assert resultado.codigo == TRANSPORTE
    assert 'mala url' in resultado.message


def test_http_no_2xx(cliente):
    with patch(POST, return_value=respuesta_webhook(500, reason='Internal Server Error')):
        resultado = cliente.post('Production', {})

    assert resultado.success is False
    assert resultado.codigo == SERVIDOR
    assert '500 Internal Server Error' in resultado.message


def test_status_distinto_de_success_usa_mensaje_del_servidor(cliente):
    body = {'status': 'error', 'message': 'Sheet not found'}
    with patch(POST, return_value=respuesta_webhook(body=body)):
        resultado = cliente.post('Production', {})

    assert resultado.success is False
    assert resultado.codigo == SERVIDOR
    assert 'Sheet not found' in resultado.message


def test_cuerpo_no_json(cliente):
    with patch(POST, return_value=respuesta_webhook(body=b'<html>Error</html>')):
        resultado = cliente.post('Production', {})

    assert resultado.success is False
    assert resultado.codigo == SERVIDOR


def test_timeout_configurable():
    cliente = ClienteSincronizacion(WEBHOOK_TEST_URL, timeout=3)
    with patch(POST, return_value=respuesta_webhook()) as mock_post:
        cliente.post('Production', {})
    assert mock_post.call_args.kwargs['timeout'] == (3, 3)


def test_corte_del_body_antes_del_plazo_es_transporte(cliente):
    response = respuesta_webhook()
    response.iter_content.side_effect = requests.ConnectionError('connection reset')

    with patch(POST, return_value=response):
        resultado = cliente.post('Production', {})

    assert resultado.codigo == TRANSPORTE
    response.close.assert_called_once()


class _GoteoHandler(BaseHTTPRequestHandler):
    """Responde 200 con un JSON válido, de a un byte cada 0.3 s."""

    def do_POST(self):
        self.rfile.read(int(self.headers.get('Content-Length', 0)))
        cuerpo = json.dumps({'status': 'success', 'message': 'x' * 20}).encode('utf-8')

        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(cuerpo)))
        self.end_headers()
        try:
            for i in range(len(cuerpo)):
                self.wfile.write(cuerpo[i:i + 1])
                self.wfile.flush()
                time.sleep(0.3)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def servidor_lento():
    servidor = ThreadingHTTPServer(('127.0.0.1', 0), _GoteoHandler)
    servidor.daemon_threads = True
    hilo = threading.Thread(target=servidor.serve_forever, daemon=True)
    hilo.start()
    yield f'http://127.0.0.1:{servidor.server_address[1]}/exec'
    servidor.shutdown()
    servidor.server_close()


def test_plazo_total_corta_respuesta_lenta(servidor_lento):
    # Cada byte llega antes del timeout de lectura, pero el total supera el plazo
    cliente = ClienteSincronizacion(servidor_lento, timeout=1)

    inicio = time.monotonic()
    resultado = cliente.post('Production', {'Mã Dự Án': 'ABC123'})
    transcurrido = time.monotonic() - inicio

    assert resultado.success is False
    assert resultado.codigo == TIEMPO_AGOTADO
    assert transcurrido < 3
