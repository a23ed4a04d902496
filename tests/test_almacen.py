"""
Tests del almacén de registros (colecciones JSON clave-valor).
"""
import json
import pytest
from cnc_reportes.constants import (
    CLAVE_USUARIOS,
    CLAVE_MAQUINAS,
    CLAVE_REPORTES_PRODUCCION,
    CLAVE_REPORTES_PARADA,
    DEFAULT_USERS,
    DEFAULT_MACHINES,
)
from cnc_reportes.extensions import db
from cnc_reportes.models.almacen import EntradaAlmacen
from cnc_reportes.models.entidades import Maquina, ReporteParada, Rol
from cnc_reportes.services.almacen_service import nuevo_id


def test_semilla_en_primera_lectura(almacen):
    assert db.session.get(EntradaAlmacen, CLAVE_USUARIOS) is None

    assert almacen.get(CLAVE_USUARIOS) == DEFAULT_USERS
    assert almacen.get(CLAVE_MAQUINAS) == DEFAULT_MACHINES

    # La semilla queda persistida
    entrada = db.session.get(EntradaAlmacen, CLAVE_USUARIOS)
    assert json.loads(entrada.valor) == DEFAULT_USERS


def test_semilla_es_idempotente(almacen):
    almacen.get(CLAVE_MAQUINAS)
    almacen.save(CLAVE_MAQUINAS, [])

    # Una colección vaciada a propósito no se vuelve a sembrar
    assert almacen.get(CLAVE_MAQUINAS) == []


def test_semilla_no_comparte_referencias(almacen):
    maquinas = almacen.get(CLAVE_MAQUINAS)
    maquinas[0]['name'] = 'MODIFICADA'
    assert DEFAULT_MACHINES[0]['name'] != 'MODIFICADA'


def test_reportes_empiezan_vacios(almacen):
    assert almacen.get(CLAVE_REPORTES_PRODUCCION) == []
    assert almacen.get(CLAVE_REPORTES_PARADA) == []
    assert db.session.get(EntradaAlmacen, CLAVE_REPORTES_PRODUCCION) is None


def test_save_reescribe_la_coleccion_completa(almacen):
    almacen.save(CLAVE_REPORTES_PARADA, [{'id': 'down-1'}, {'id': 'down-2'}])
    almacen.save(CLAVE_REPORTES_PARADA, [{'id': 'down-3'}])

    assert almacen.get(CLAVE_REPORTES_PARADA) == [{'id': 'down-3'}]


def test_coleccion_desconocida(almacen):
    with pytest.raises(ValueError):
        almacen.get('otra_cosa')
    with pytest.raises(ValueError):
        almacen.save('otra_cosa', [])


def test_accesores_tipados(almacen):
    usuarios = almacen.obtener_usuarios()
    admin = next(u for u in usuarios if u.username == 'admin')
    assert admin.role == Rol.ADMIN
    assert admin.es_admin

    almacen.guardar_maquinas([Maquina(id='machine-9', name='Fresadora')])
    assert [m.name for m in almacen.obtener_maquinas()] == ['Fresadora']

    parada = ReporteParada(id='down-1', downtime_date='2024-01-02', machine_name='Fresadora',
                           start_time='10:00', end_time='10:30', reason='Corte de luz')
    almacen.guardar_reportes_parada([parada])
    assert almacen.obtener_reportes_parada() == [parada]


def test_usuario_sin_maquina_no_guarda_clave(almacen):
    usuarios = almacen.obtener_usuarios()
    usuarios[1].default_machine_id = ''
    almacen.guardar_usuarios(usuarios)

    assert 'defaultMachineId' not in almacen.get(CLAVE_USUARIOS)[1]


def test_nuevo_id_formato():
    id_ = nuevo_id('prod')
    prefijo, ms = id_.split('-')
    assert prefijo == 'prod'
    assert ms.isdigit()
