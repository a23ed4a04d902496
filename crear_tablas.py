from cnc_reportes import create_app
from cnc_reportes.extensions import db
from cnc_reportes.constants import COLECCIONES
from cnc_reportes.services.almacen_service import AlmacenRegistros

app = create_app()


def inicializar_bd():
    with app.app_context():
        print("🗑️  Borrando base de datos antigua...")
        try:
            db.drop_all()
            print("🏗️  Creando tablas nuevas...")
            db.create_all()
        except Exception as e:
            print(f"\n❌ Ocurrió un error inesperado al conectar con la BD: {e}")
            return

        print("🌱 Insertando datos semilla (usuarios y máquinas por defecto)...")
        almacen = AlmacenRegistros(db.session)
        for coleccion in COLECCIONES:
            registros = almacen.get(coleccion)
            print(f"   - {coleccion}: {len(registros)} registros")

        print("✅ Base de datos lista.")


if __name__ == '__main__':
    inicializar_bd()
