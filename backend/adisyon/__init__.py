from flask import Flask

from adisyon.commands import register_commands
from adisyon.extensions import db, migrate


def create_app(config_class=None):
    if config_class is None:
        # Imported here so .env files loaded by the entry point are visible.
        from adisyon.config import Config as config_class

    app = Flask(__name__)
    app.config.from_object(config_class)

    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        from adisyon import models  # noqa: F401

    register_commands(app)
    return app
