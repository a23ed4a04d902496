"""
Gestión de usuarios y máquinas sobre el almacén (leer, modificar, guardar
la colección completa).
"""
from cnc_reportes.models.entidades import Usuario, Maquina, Rol
from cnc_reportes.services.almacen_service import nuevo_id
from cnc_reportes.utils.error_utils import APIError, ErrorCodes, NotFoundError, log_operation


def _username_duplicado(usuarios, username, excluir_id=None):
    return any(u.username == username and u.id != excluir_id for u in usuarios)


def _error_duplicado(username):
    code, status = ErrorCodes.DUPLICATE
    return APIError(f"El usuario '{username}' ya existe", status, code)


def crear_usuario(almacen, data: dict) -> Usuario:
    for campo in ('username', 'fullName', 'password'):
        if not data.get(campo):
            raise ValueError(f"Campo requerido faltante: {campo}")

    usuarios = almacen.obtener_usuarios()
    if _username_duplicado(usuarios, data['username']):
        raise _error_duplicado(data['username'])

    usuario = Usuario(
        id=nuevo_id('user', (u.id for u in usuarios)),
        username=data['username'],
        full_name=data['fullName'],
        role=Rol(data.get('role', Rol.OPERATOR.value)),
        password=data['password'],
        default_machine_id=data.get('defaultMachineId') or None,
    )
    almacen.guardar_usuarios(usuarios + [usuario])
    log_operation('crear_usuario', usuario_id=usuario.id, username=usuario.username)
    return usuario


def editar_usuario(almacen, usuario_id, data: dict) -> Usuario:
    """Contraseña vacía u omitida conserva la actual."""
    usuarios = almacen.obtener_usuarios()
    actual = next((u for u in usuarios if u.id == usuario_id), None)
    if actual is None:
        raise NotFoundError(f"Usuario {usuario_id} no encontrado")

    username = data.get('username') or actual.username
    if _username_duplicado(usuarios, username, excluir_id=usuario_id):
        raise _error_duplicado(username)

    editado = Usuario(
        id=actual.id,
        username=username,
        full_name=data.get('fullName') or actual.full_name,
        role=Rol(data.get('role', actual.role.value)),
        password=data.get('password') or actual.password,
        default_machine_id=data.get('defaultMachineId', actual.default_machine_id) or None,
    )
    almacen.guardar_usuarios([editado if u.id == usuario_id else u for u in usuarios])
    log_operation('editar_usuario', usuario_id=usuario_id)
    return editado


def eliminar_usuario(almacen, usuario_id) -> None:
    usuarios = almacen.obtener_usuarios()
    restantes = [u for u in usuarios if u.id != usuario_id]
    if len(restantes) == len(usuarios):
        raise NotFoundError(f"Usuario {usuario_id} no encontrado")
    almacen.guardar_usuarios(restantes)
    log_operation('eliminar_usuario', usuario_id=usuario_id)


def crear_maquina(almacen, data: dict) -> Maquina:
    nombre = (data.get('name') or '').strip()
    if not nombre:
        raise ValueError("Campo requerido faltante: name")

    maquinas = almacen.obtener_maquinas()
    maquina = Maquina(id=nuevo_id('machine', (m.id for m in maquinas)), name=nombre)
    almacen.guardar_maquinas(maquinas + [maquina])
    log_operation('crear_maquina', maquina_id=maquina.id, nombre=nombre)
    return maquina


def editar_maquina(almacen, maquina_id, data: dict) -> Maquina:
    nombre = (data.get('name') or '').strip()
    if not nombre:
        raise ValueError("Campo requerido faltante: name")

    maquinas = almacen.obtener_maquinas()
    if not any(m.id == maquina_id for m in maquinas):
        raise NotFoundError(f"Máquina {maquina_id} no encontrada")

    editada = Maquina(id=maquina_id, name=nombre)
    # Los reportes ya enviados conservan el nombre anterior
    almacen.guardar_maquinas([editada if m.id == maquina_id else m for m in maquinas])
    log_operation('editar_maquina', maquina_id=maquina_id, nombre=nombre)
    return editada


def eliminar_maquina(almacen, maquina_id) -> None:
    maquinas = almacen.obtener_maquinas()
    restantes = [m for m in maquinas if m.id != maquina_id]
    if len(restantes) == len(maquinas):
        raise NotFoundError(f"Máquina {maquina_id} no encontrada")
    almacen.guardar_maquinas(restantes)
    log_operation('eliminar_maquina', maquina_id=maquina_id)
