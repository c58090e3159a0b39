import os


DEFAULT_SEED_DATA_PATH = os.path.join(os.path.dirname(__file__), "data", "seed_data.json")


def _as_bool(value, default=False):
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///adisyon.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ENV = os.getenv("FLASK_ENV", "development")
    SEED_DATA_PATH = os.getenv("SEED_DATA_PATH", DEFAULT_SEED_DATA_PATH).strip()
    SEED_DEFAULT_PASSWORD = os.getenv("SEED_DEFAULT_PASSWORD", "123456")
    SEED_PASSWORD_METHOD = os.getenv("SEED_PASSWORD_METHOD", "pbkdf2:sha256:600000").strip()
    # Outside production every seeded account shares the demo password;
    # in production each account without its own password gets a generated one.
    SEED_ALLOW_SHARED_PASSWORD = _as_bool(
        os.getenv("SEED_ALLOW_SHARED_PASSWORD"),
        default=ENV != "production",
    )
    SEED_SHOW_CREDENTIALS = _as_bool(os.getenv("SEED_SHOW_CREDENTIALS"), default=True)
