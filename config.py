# config.py
import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "super-secret-key"
    _BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    _DEFAULT_DB_PATH = os.path.join(_BASE_DIR, "instance", "campusconnect.db")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or f"sqlite:///{_DEFAULT_DB_PATH}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Códigos de ingreso
    JOIN_CODE_LENGTH = int(os.environ.get("JOIN_CODE_LENGTH", "8"))
    DEFAULT_CODE_EXPIRY_DAYS = int(os.environ.get("DEFAULT_CODE_EXPIRY_DAYS", "30"))

    SUPPORT_EMAIL = os.environ.get("SUPPORT_EMAIL", "support@campusconnect.edu")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    LOG_LEVEL = "DEBUG"
