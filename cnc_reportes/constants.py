"""
Constantes del sistema de reportes CNC: claves del almacén, datos semilla
y opciones fijas de los formularios.
"""

# Claves fijas de las colecciones en el almacén local
CLAVE_USUARIOS = 'cnc_users'
CLAVE_MAQUINAS = 'cnc_machines'
CLAVE_REPORTES_PRODUCCION = 'cnc_production_reports'
CLAVE_REPORTES_PARADA = 'cnc_downtime_reports'

COLECCIONES = (
    CLAVE_USUARIOS,
    CLAVE_MAQUINAS,
    CLAVE_REPORTES_PRODUCCION,
    CLAVE_REPORTES_PARADA,
)

# Nombre de las pestañas en la hoja de Google
HOJA_PRODUCCION = 'Production'
HOJA_PARADA = 'Downtime'

# Formato HH:MM (24h) aceptado para horas de inicio/fin
PATRON_HORA = r'^([01]?[0-9]|2[0-3]):[0-5][0-9]$'

OPCIONES_PROCESO_SUPERFICIE = [
    'N/A',
    'Anodizing',
    'Black Oxide',
    'Zinc Plating',
    'Nickel Plating',
    'Powder Coating',
    'Heat Treatment',
    'Sandblasting',
    'Polishing',
]

# Semilla: se carga sólo la primera vez que se lee la colección
DEFAULT_MACHINES = [
    {'id': 'machine-1', 'name': 'CNC-01'},
    {'id': 'machine-2', 'name': 'CNC-02'},
    {'id': 'machine-3', 'name': 'CNC-03'},
    {'id': 'machine-4', 'name': 'Lathe-01'},
]

DEFAULT_USERS = [
    {
        'id': 'user-1',
        'username': 'admin',
        'password': 'admin',
        'fullName': 'Administrator',
        'role': 'ADMIN',
    },
    {
        'id': 'user-2',
        'username': 'operator1',
        'password': '123',
        'fullName': 'Nguyen Van A',
        'role': 'OPERATOR',
        'defaultMachineId': 'machine-1',
    },
    {
        'id': 'user-3',
        'username': 'operator2',
        'password': '123',
        'fullName': 'Tran Thi B',
        'role': 'OPERATOR',
        'defaultMachineId': 'machine-2',
    },
]

# Vistas del frontend y roles que pueden verlas
VISTAS = [
    {'id': 'dashboard', 'label': 'Panel', 'roles': ['ADMIN', 'OPERATOR']},
    {'id': 'production', 'label': 'Reporte de Producción', 'roles': ['ADMIN', 'OPERATOR']},
    {'id': 'downtime', 'label': 'Reporte de Paradas', 'roles': ['ADMIN', 'OPERATOR']},
    {'id': 'history', 'label': 'Historial de Reportes', 'roles': ['ADMIN', 'OPERATOR']},
    {'id': 'users', 'label': 'Gestión de Usuarios', 'roles': ['ADMIN']},
    {'id': 'machines', 'label': 'Gestión de Máquinas', 'roles': ['ADMIN']},
]
