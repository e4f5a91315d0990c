# app.py
import logging

import click
from flask import Flask, jsonify
from flask_login import current_user, login_required
from flask_migrate import Migrate

from config import Config
from extensions import db, login_manager


def create_app(config_object=Config) -> Flask:
    """
    App factory.
    - Carga configuración
    - Inicializa extensiones
    - Registra blueprints y manejo de errores
    - Conecta migraciones
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    _configure_logging(app)

    # Extensiones
    db.init_app(app)
    login_manager.init_app(app)

    # User loader para Flask-Login
    from models import User

    @login_manager.user_loader
    def load_user(user_id: str):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required.", "kind": "unauthorized"}), 401

    # Blueprints de la capa API
    from api import api_bp
    from api.auth import auth_bp
    from api.admin import admin_bp
    from api.utils.errors import register_error_handlers
    from api.utils.permissions import close_current_session, get_current_session

    app.register_blueprint(api_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    register_error_handlers(app)

    # El contexto de sesión vive lo que dura el request.
    app.teardown_request(close_current_session)

    # Migraciones (Alembic/Flask-Migrate)
    Migrate(app, db)

    @app.get("/")
    @login_required
    def home():
        """
        Entrada principal: indica qué dashboard montar según el perfil.
        Un perfil pendiente siempre recibe la pantalla de espera.
        """
        from services import admin_scope

        session = get_current_session()
        state = session.state()
        view = session.view() if state.is_admitted else None
        scope = admin_scope(session.profile) if state.is_admitted else None
        return jsonify({
            "user_id": current_user.id,
            "state": state.value,
            "view": view.value if view else "pending",
            "admin_scope": scope.value if scope else None,
        })

    _register_cli(app)
    return app


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(level)


def _register_cli(app: Flask) -> None:
    @app.cli.command("seed-super-admin")
    @click.argument("email")
    @click.argument("password")
    @click.option("--name", default="Super Admin", help="Nombre visible del super admin.")
    def seed_super_admin(email, password, name):
        """Crea (o reutiliza) la cuenta de super admin."""
        from seeds.basic_seed import ensure_super_admin

        user, profile = ensure_super_admin(email, password, name)
        db.session.commit()
        click.echo(f"Super admin listo: {user.email} (profile {profile.id})")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Carga el college, departamento y cuentas de demo."""
        from seeds.basic_seed import run_basic_seed

        run_basic_seed()
        click.echo("Seed de demo cargado.")


app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
