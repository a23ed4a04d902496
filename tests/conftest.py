import json
import os
# Force SQLite for tests -> MUST be done before importing cnc_reportes.config
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from unittest.mock import MagicMock

import pytest
from cnc_reportes import create_app, db
from cnc_reportes.services.almacen_service import AlmacenRegistros

WEBHOOK_TEST_URL = 'https://script.google.com/macros/s/TEST-DEPLOYMENT/exec'


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SECRET_KEY": "test",
        "SHEET_WEBHOOK_URL": WEBHOOK_TEST_URL,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def almacen(app):
    """Almacén sobre la BD en memoria del test."""
    return AlmacenRegistros(db.session)


def login(client, username, password):
    return client.post('/api/login', json={'username': username, 'password': password})


@pytest.fixture
def admin_client(client):
    """Cliente con sesión del administrador semilla."""
    response = login(client, 'admin', 'admin')
    assert response.status_code == 200
    return client


@pytest.fixture
def operator_client(client):
    """Cliente con sesión de 'Nguyen Van A' (operador, máquina CNC-01)."""
    response = login(client, 'operator1', '123')
    assert response.status_code == 200
    return client


def respuesta_webhook(status_code=200, body=None, reason='OK'):
    """
    Simula la respuesta (stream) del Apps Script. `body` puede ser un dict,
    bytes crudos (p.ej. HTML) o None para {'status': 'success'}.
    """
    if body is None:
        body = {'status': 'success'}
    contenido = body if isinstance(body, bytes) else json.dumps(body).encode('utf-8')

    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.iter_content.side_effect = lambda chunk_size=1: iter([contenido])
    return response


def reporte_produccion_data(**overrides):
    """Payload mínimo válido de un reporte de producción (formato JSON)."""
    data = {
        'deploymentDate': '2024-03-05',
        'projectCode': 'abc123',
        'itemName': '01 - Soporte',
        'partName': 'Brida',
        'machineName': 'CNC-01',
        'plannedQty': 10,
        'actualQty': 3,
        'ngQty': 0,
        'startTime': '08:00',
        'endTime': '09:30',
        'surfaceProcess': 'N/A',
        'otherProcess': '',
        'operator': 'Nguyen Van A',
        'supervisor': 'Administrator',
        'programmer': '',
        'setter': '',
    }
    data.update(overrides)
    return data


def reporte_parada_data(**overrides):
    data = {
        'downtimeDate': '2024-03-05',
        'machineName': 'CNC-02',
        'startTime': '10:00',
        'endTime': '11:15',
        'reason': 'Cambio de herramienta',
    }
    data.update(overrides)
    return data
