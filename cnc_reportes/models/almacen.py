from datetime import datetime, timezone
from cnc_reportes.extensions import db


class EntradaAlmacen(db.Model):
    """
    Una colección completa del almacén local (usuarios, máquinas, reportes).
    El valor es la lista serializada en JSON; se reescribe entera en cada guardado.
    """
    __tablename__ = 'almacen_local'

    clave = db.Column(db.String(64), primary_key=True)
    valor = db.Column(db.Text, nullable=False, default='[]')
    actualizado = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f'<EntradaAlmacen {self.clave}>'
