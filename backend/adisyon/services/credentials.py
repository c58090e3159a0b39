import secrets

from werkzeug.security import generate_password_hash

from adisyon.models import User


class CredentialError(ValueError):
    pass


class CredentialPolicy:
    """Decides which password each seeded account gets.

    With ``allow_shared`` the default password is hashed once and that hash
    is reused for every account that does not declare its own password. This
    is only meant for demo and fixture databases; without it every such
    account gets its own generated password.
    """

    def __init__(self, default_password, method, allow_shared=True):
        self.default_password = default_password
        self.method = method
        self.allow_shared = allow_shared

    @classmethod
    def from_config(cls, config):
        return cls(
            default_password=config.get("SEED_DEFAULT_PASSWORD"),
            method=config.get("SEED_PASSWORD_METHOD") or "pbkdf2:sha256:600000",
            allow_shared=bool(config.get("SEED_ALLOW_SHARED_PASSWORD", True)),
        )

    def hash(self, password):
        return generate_password_hash(password, method=self.method)

    def resolve(self, catalog, skip_usernames=()):
        """Return ``{username: (password, password_hash)}`` for the seeded users.

        Accounts in ``skip_usernames`` already exist and keep their password,
        so nothing is hashed for them.
        """
        shared = None
        resolved = {}

        for spec in catalog["users"]:
            username = spec["username"]
            if username in skip_usernames:
                continue
            own_password = spec.get("password")

            if own_password is not None:
                if not own_password.strip():
                    raise CredentialError(f"empty password declared for {username}")
                resolved[username] = (own_password, self.hash(own_password))
                continue

            if not self.allow_shared:
                generated = secrets.token_urlsafe(12)
                resolved[username] = (generated, self.hash(generated))
                continue

            if shared is None:
                if not self.default_password or not self.default_password.strip():
                    raise CredentialError("SEED_DEFAULT_PASSWORD is required when the shared password is allowed")
                shared = (self.default_password, self.hash(self.default_password))
            resolved[username] = shared

        return resolved


def set_user_password(session, username, password, method="pbkdf2:sha256:600000"):
    username = (username or "").strip()
    password = password or ""
    if not username or not password.strip():
        raise CredentialError("username and password are required")

    user = session.query(User).filter_by(username=username).first()
    if not user:
        raise CredentialError(f"user {username} not found")

    user.password_hash = generate_password_hash(password, method=method)
    user.is_active = True
    session.flush()
    return {"username": username, "updated": 1}
