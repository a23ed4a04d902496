"""
Registros del dominio guardados como JSON en el almacén local.
Los atributos son snake_case; to_dict/from_dict usan las claves camelCase
del formato persistido (el mismo que consume el frontend).
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class Rol(str, Enum):
    ADMIN = 'ADMIN'
    OPERATOR = 'OPERATOR'


@dataclass
class Usuario:
    id: str
    username: str
    full_name: str
    role: Rol = Rol.OPERATOR
    password: Optional[str] = None  # Texto plano: sólo para alta y login
    default_machine_id: Optional[str] = None

    @property
    def es_admin(self):
        return self.role == Rol.ADMIN

    def sin_password(self):
        return replace(self, password=None)

    def to_dict(self, incluir_password=True) -> dict:
        data = {
            'id': self.id,
            'username': self.username,
            'fullName': self.full_name,
            'role': self.role.value,
        }
        if incluir_password and self.password is not None:
            data['password'] = self.password
        # Sin máquina asignada la clave no se guarda
        if self.default_machine_id:
            data['defaultMachineId'] = self.default_machine_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Usuario':
        return cls(
            id=data.get('id', ''),
            username=data.get('username', ''),
            full_name=data.get('fullName', ''),
            role=Rol(data.get('role', Rol.OPERATOR.value)),
            password=data.get('password'),
            default_machine_id=data.get('defaultMachineId') or None,
        )


@dataclass
class Maquina:
    id: str
    name: str

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: dict) -> 'Maquina':
        return cls(id=data.get('id', ''), name=data.get('name', ''))


@dataclass
class ReporteProduccion:
    id: Optional[str] = None
    deployment_date: str = ''
    project_code: str = ''
    customer_code: str = ''
    item_name: str = ''
    part_name: str = ''
    machine_name: str = ''  # Copia del nombre de la máquina al momento del reporte
    planned_qty: int = 0
    actual_qty: int = 0
    ng_qty: int = 0
    start_time: str = ''
    end_time: str = ''
    surface_process: str = 'N/A'
    other_process: str = ''
    operator: str = ''  # fullName del usuario, no su id
    supervisor: str = ''
    programmer: str = ''
    setter: str = ''
    estimated_time_per_piece: float = 0.0

    def to_dict(self) -> dict:
        data = {
            'deploymentDate': self.deployment_date,
            'projectCode': self.project_code,
            'customerCode': self.customer_code,
            'itemName': self.item_name,
            'partName': self.part_name,
            'machineName': self.machine_name,
            'plannedQty': self.planned_qty,
            'actualQty': self.actual_qty,
            'ngQty': self.ng_qty,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'surfaceProcess': self.surface_process,
            'otherProcess': self.other_process,
            'operator': self.operator,
            'supervisor': self.supervisor,
            'programmer': self.programmer,
            'setter': self.setter,
            'estimatedTimePerPiece': self.estimated_time_per_piece,
        }
        if self.id:
            data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ReporteProduccion':
        return cls(
            id=data.get('id') or None,
            deployment_date=data.get('deploymentDate', ''),
            project_code=data.get('projectCode', ''),
            customer_code=data.get('customerCode', ''),
            item_name=data.get('itemName', ''),
            part_name=data.get('partName', ''),
            machine_name=data.get('machineName', ''),
            planned_qty=data.get('plannedQty', 0),
            actual_qty=data.get('actualQty', 0),
            ng_qty=data.get('ngQty', 0),
            start_time=data.get('startTime', ''),
            end_time=data.get('endTime', ''),
            surface_process=data.get('surfaceProcess') or 'N/A',
            other_process=data.get('otherProcess', ''),
            operator=data.get('operator', ''),
            supervisor=data.get('supervisor', ''),
            programmer=data.get('programmer') or '',
            setter=data.get('setter') or '',
            estimated_time_per_piece=data.get('estimatedTimePerPiece', 0.0),
        )


@dataclass
class ReporteParada:
    id: Optional[str] = None
    downtime_date: str = ''
    machine_name: str = ''
    start_time: str = ''
    end_time: str = ''
    reason: str = ''

    def to_dict(self) -> dict:
        data = {
            'downtimeDate': self.downtime_date,
            'machineName': self.machine_name,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'reason': self.reason,
        }
        if self.id:
            data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ReporteParada':
        return cls(
            id=data.get('id') or None,
            downtime_date=data.get('downtimeDate', ''),
            machine_name=data.get('machineName', ''),
            start_time=data.get('startTime', ''),
            end_time=data.get('endTime', ''),
            reason=data.get('reason', ''),
        )


# --- Referencias desnormalizadas ---
# Los reportes guardan nombres copiados, no ids. Si algún día se normaliza,
# sólo estas funciones cambian.

def nombre_maquina_de(maquina: Maquina) -> str:
    return maquina.name


def nombre_usuario_de(usuario: Usuario) -> str:
    return usuario.full_name


def maquina_por_defecto(usuario: Usuario, maquinas) -> Optional[Maquina]:
    """Máquina asignada al usuario, si existe todavía en el catálogo."""
    if not usuario.default_machine_id:
        return None
    return next((m for m in maquinas if m.id == usuario.default_machine_id), None)
