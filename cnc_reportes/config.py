import os
from dotenv import load_dotenv

load_dotenv()

# URL de ejemplo del Apps Script; mientras contenga este marcador el envío a la hoja queda deshabilitado
WEBHOOK_PLACEHOLDER = 'https://script.google.com/macros/s/YOUR_DEPLOYMENT_ID/exec'


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///cnc_reportes.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Firma de la cookie de sesión (usuario actual)
    SECRET_KEY = os.getenv('SECRET_KEY', 'cnc-reportes-dev')

    # Webhook de Google Sheets (Apps Script) que replica los reportes
    SHEET_WEBHOOK_URL = os.getenv('SHEET_WEBHOOK_URL', WEBHOOK_PLACEHOLDER)
    SHEET_WEBHOOK_TIMEOUT = float(os.getenv('SHEET_WEBHOOK_TIMEOUT', '15'))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
