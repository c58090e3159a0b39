import logging
import os

import click
from dotenv import load_dotenv

from adisyon.extensions import db
from adisyon.models import User
from adisyon.seed_catalog import load_catalog
from adisyon.seed_data import seed_initial_data
from adisyon.services.credentials import CredentialPolicy, set_user_password


logger = logging.getLogger(__name__)

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def configure_logging(level=logging.INFO):
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def run_seed(app):
    """Seed the database bound to ``app`` inside a single transaction.

    Any failure is logged, rolled back and re-raised; re-running the seed is
    the recovery path.
    """
    with app.app_context():
        try:
            catalog = load_catalog(app.config["SEED_DATA_PATH"])
            policy = CredentialPolicy.from_config(app.config)
            with db.session.begin():
                db.create_all()
                existing = {username for (username,) in db.session.query(User.username)}
                credentials = policy.resolve(catalog, skip_usernames=existing)
                summary = seed_initial_data(db.session, catalog, credentials)
        except Exception:
            logger.exception("Seed failed, no changes were committed")
            raise
    logger.info("Seed completed: %s", summary.created)
    return summary


def format_credentials(summary):
    lines = ["Login credentials:"]
    for username, role, section, password in summary.credentials:
        label = f"{role}, {section}" if section else role
        shown = password if password is not None else "(unchanged, account already existed)"
        lines.append(f"  {username} ({label}): {username} / {shown}")
    return "\n".join(lines)


def echo_summary(app, summary):
    click.echo("Seed completed successfully")
    click.echo(str(summary.as_dict()))
    if app.config.get("SEED_SHOW_CREDENTIALS", True):
        if app.config.get("SEED_ALLOW_SHARED_PASSWORD", True):
            click.echo("Shared demo password: for local and fixture databases only.")
        click.echo(format_credentials(summary))


def register_commands(app):
    @app.cli.command("seed")
    def seed_command():
        """Create the reference data (sections, tables, staff, menu, chef permissions)."""
        configure_logging()
        try:
            summary = run_seed(app)
        except Exception as exc:
            raise click.ClickException(f"Seed failed: {exc}") from exc
        echo_summary(app, summary)

    @app.cli.command("set-password")
    @click.argument("username")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="New password.")
    def set_password_command(username, password):
        """Replace the password of an existing account."""
        with app.app_context():
            try:
                with db.session.begin():
                    result = set_user_password(
                        db.session,
                        username=username,
                        password=password,
                        method=CredentialPolicy.from_config(app.config).method,
                    )
            except ValueError as exc:
                raise click.ClickException(str(exc)) from exc
        click.echo(f"Password updated for {result['username']}")


def main():
    load_dotenv(dotenv_path=os.path.join(BACKEND_DIR, ".env"))
    configure_logging()

    from adisyon import create_app

    app = create_app()
    try:
        summary = run_seed(app)
    except Exception:
        # run_seed already logged the traceback.
        return 1
    echo_summary(app, summary)
    return 0
