"""
Cliente de sincronización con la hoja de Google (webhook de Apps Script).

Envía {"sheetName": ..., "data": {...}} por POST y clasifica el resultado.
Nunca lanza excepciones hacia afuera: todo fallo vuelve como ResultadoSync.
"""
import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

import requests

logger = logging.getLogger('cnc_reportes')

TIMEOUT_SEGUNDOS = 15
MARCADOR_NO_CONFIGURADO = 'YOUR_DEPLOYMENT_ID'

# Códigos de resultado
OK = 'OK'
CONFIGURACION = 'CONFIGURACION'
TIEMPO_AGOTADO = 'TIEMPO_AGOTADO'
TRANSPORTE = 'TRANSPORTE'
SERVIDOR = 'SERVIDOR'

MENSAJE_EXITO = '¡Datos enviados correctamente!'
MENSAJE_TIEMPO_AGOTADO = 'La solicitud excedió el tiempo de espera. Intente nuevamente.'

# Las respuestas del Apps Script son de pocos bytes
TAMANO_BLOQUE = 1


class SyncError(Exception):
    """Fallo al replicar en la hoja. `codigo` identifica la causa."""
    codigo = SERVIDOR

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ConfigurationError(SyncError):
    codigo = CONFIGURACION


class SyncTimeoutError(SyncError):
    codigo = TIEMPO_AGOTADO


class TransportError(SyncError):
    codigo = TRANSPORTE


class ServerError(SyncError):
    codigo = SERVIDOR


@dataclass
class ResultadoSync:
    success: bool
    message: str
    codigo: str = OK

    def to_dict(self) -> dict:
        return {'success': self.success, 'message': self.message, 'code': self.codigo}


def endpoint_configurado(url: Optional[str]) -> bool:
    return bool(url) and MARCADOR_NO_CONFIGURADO not in url


class ClienteSincronizacion:
    """
    Cliente HTTP del webhook.

    Args:
        url: URL del Apps Script desplegado
        timeout: plazo total en segundos de la petición completa (default 15)
    """

    def __init__(self, url, timeout=TIMEOUT_SEGUNDOS):
        self.url = url
        self.timeout = timeout

    def post(self, sheet_name: str, data: dict) -> ResultadoSync:
        try:
            self._enviar(sheet_name, data)
        except SyncError as e:
            logger.warning(f"Sync {sheet_name} fallido [{e.codigo}]: {e.message}")
            return ResultadoSync(False, e.message, e.codigo)

        logger.info(f"Sync {sheet_name} OK")
        return ResultadoSync(True, MENSAJE_EXITO)

    def _enviar(self, sheet_name, data):
        # Se revisa en cada llamada: la URL puede cambiar entre envíos
        if not endpoint_configurado(self.url):
            raise ConfigurationError('Endpoint no configurado. Contacte al administrador.')

        # Plazo total de la petición, no sólo por lectura de socket
        limite = time.monotonic() + self.timeout
        try:
            response = requests.post(
                self.url,
                json={'sheetName': sheet_name, 'data': data},
                headers={'Content-Type': 'application/json'},
                timeout=(self.timeout, self.timeout),
                stream=True,
            )
        except requests.Timeout:
            raise SyncTimeoutError(MENSAJE_TIEMPO_AGOTADO)
        except requests.ConnectionError:
            raise TransportError(
                'Error de conexión: no se pudo enviar a la hoja de Google. '
                'Revise la URL del webhook y el despliegue del Apps Script.'
            )
        except requests.RequestException as e:
            raise TransportError(f'Envío fallido: {e}')

        try:
            if not response.ok:
                raise ServerError(f'Error de red: {response.status_code} {response.reason}')
            cuerpo = _leer_cuerpo(response, limite)
        finally:
            response.close()

        try:
            result = json.loads(cuerpo)
        except ValueError:
            raise ServerError('Respuesta inválida del servidor (no es JSON).')

        if not isinstance(result, dict) or result.get('status') != 'success':
            mensaje = result.get('message') if isinstance(result, dict) else None
            raise ServerError(f'Error del servidor: {mensaje or "respuesta sin estado success"}')

        return result


def _leer_cuerpo(response, limite) -> bytes:
    """
    Lee el cuerpo en bloques chicos y corta apenas se pasa `limite`
    (time.monotonic). Un servidor que responde de a un byte no puede
    estirar la petición más allá del plazo.
    """
    partes = []
    try:
        if time.monotonic() > limite:
            raise SyncTimeoutError(MENSAJE_TIEMPO_AGOTADO)
        for parte in response.iter_content(chunk_size=TAMANO_BLOQUE):
            partes.append(parte)
            if time.monotonic() > limite:
                raise SyncTimeoutError(MENSAJE_TIEMPO_AGOTADO)
    except requests.RequestException as e:
        # requests reporta una lectura vencida del body como ConnectionError
        if time.monotonic() >= limite:
            raise SyncTimeoutError(MENSAJE_TIEMPO_AGOTADO)
        raise TransportError(f'Envío fallido: {e}')
    return b''.join(partes)


def obtener_cliente_sync():
    """Cliente construido con la configuración vigente de la app."""
    from flask import current_app
    return ClienteSincronizacion(
        current_app.config.get('SHEET_WEBHOOK_URL'),
        timeout=current_app.config.get('SHEET_WEBHOOK_TIMEOUT', TIMEOUT_SEGUNDOS),
    )
