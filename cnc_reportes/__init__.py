import logging

from flask import Flask
from cnc_reportes.config import Config
from cnc_reportes.extensions import db, cors


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.getLogger('cnc_reportes').setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)
    cors.init_app(app)  # El frontend corre en otro origen y envía la cookie de sesión

    # --- IMPORTAR MODELOS ---
    # La tabla del almacén debe estar registrada antes de create_all()
    from cnc_reportes.models import almacen

    # --- REGISTRO DE RUTAS ---
    from cnc_reportes.api.rutas_auth import auth_bp
    from cnc_reportes.api.rutas_catalogo import catalogo_bp
    from cnc_reportes.api.rutas_reportes import reportes_bp
    from cnc_reportes.api.rutas_panel import panel_bp

    # Todo lo que esté en esos archivos empezará con /api
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(catalogo_bp, url_prefix='/api')
    app.register_blueprint(reportes_bp, url_prefix='/api')
    app.register_blueprint(panel_bp, url_prefix='/api')

    return app


__all__ = ['create_app', 'db']
