import os
import tempfile
import unittest

from werkzeug.security import check_password_hash, generate_password_hash

from adisyon import create_app
from adisyon.extensions import db
from adisyon.models import RoleEnum, User
from adisyon.seed_catalog import parse_catalog
from adisyon.services.credentials import CredentialError, CredentialPolicy, set_user_password


TEST_METHOD = "pbkdf2:sha256:1000"

CATALOG = parse_catalog(
    {
        "users": [
            {"username": "patron", "full_name": "Restoran Patronu", "role": "PATRON"},
            {"username": "sef1", "full_name": "Şef - Nostaji", "role": "CHEF"},
            {"username": "kasa", "full_name": "Kasa Personeli", "role": "CASHIER", "password": "kasa-2024"},
        ]
    }
)


class CredentialPolicyTestCase(unittest.TestCase):
    def test_shared_password_is_hashed_once(self):
        resolved = CredentialPolicy("123456", TEST_METHOD).resolve(CATALOG)

        self.assertEqual(resolved["patron"][0], "123456")
        self.assertEqual(resolved["patron"][1], resolved["sef1"][1])
        self.assertTrue(resolved["patron"][1].startswith("pbkdf2:sha256:1000$"))
        self.assertTrue(check_password_hash(resolved["sef1"][1], "123456"))

    def test_own_password_wins(self):
        resolved = CredentialPolicy("123456", TEST_METHOD).resolve(CATALOG)

        self.assertEqual(resolved["kasa"][0], "kasa-2024")
        self.assertTrue(check_password_hash(resolved["kasa"][1], "kasa-2024"))

    def test_generated_passwords_when_shared_is_not_allowed(self):
        resolved = CredentialPolicy("123456", TEST_METHOD, allow_shared=False).resolve(CATALOG)

        self.assertNotEqual(resolved["patron"][0], "123456")
        self.assertNotEqual(resolved["patron"][0], resolved["sef1"][0])
        self.assertTrue(check_password_hash(resolved["patron"][1], resolved["patron"][0]))
        self.assertEqual(resolved["kasa"][0], "kasa-2024")

    def test_empty_shared_password_is_rejected(self):
        with self.assertRaises(CredentialError):
            CredentialPolicy("  ", TEST_METHOD).resolve(CATALOG)

    def test_empty_own_password_is_rejected(self):
        catalog = parse_catalog({"users": [{"username": "admin", "full_name": "Admin", "role": "ADMIN", "password": " "}]})
        with self.assertRaises(CredentialError):
            CredentialPolicy("123456", TEST_METHOD).resolve(catalog)

    def test_existing_accounts_are_not_resolved(self):
        resolved = CredentialPolicy("123456", TEST_METHOD).resolve(CATALOG, skip_usernames={"patron", "kasa"})

        self.assertEqual(set(resolved), {"sef1"})
        self.assertTrue(check_password_hash(resolved["sef1"][1], "123456"))

    def test_from_config(self):
        policy = CredentialPolicy.from_config(
            {
                "SEED_DEFAULT_PASSWORD": "demo",
                "SEED_PASSWORD_METHOD": TEST_METHOD,
                "SEED_ALLOW_SHARED_PASSWORD": False,
            }
        )
        self.assertEqual(policy.default_password, "demo")
        self.assertEqual(policy.method, TEST_METHOD)
        self.assertFalse(policy.allow_shared)


class SetUserPasswordTestCase(unittest.TestCase):
    def setUp(self):
        self.db_fd, self.db_path = tempfile.mkstemp(prefix="adisyon_test_password_", suffix=".db")

        class TestConfig:
            TESTING = True
            SQLALCHEMY_TRACK_MODIFICATIONS = False
            SQLALCHEMY_DATABASE_URI = f"sqlite:///{self.db_path}"

        self.app = create_app(TestConfig)

        with self.app.app_context():
            db.create_all()
            db.session.add(
                User(
                    username="admin",
                    password_hash=generate_password_hash("123456", method=TEST_METHOD),
                    full_name="Sistem Yöneticisi",
                    role=RoleEnum.ADMIN,
                    is_active=False,
                )
            )
            db.session.commit()

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()

        os.close(self.db_fd)
        os.unlink(self.db_path)

    def test_updates_existing_user(self):
        with self.app.app_context():
            result = set_user_password(db.session, "admin", "yeni-sifre", method=TEST_METHOD)
            db.session.commit()

            self.assertEqual(result, {"username": "admin", "updated": 1})
            user = db.session.query(User).filter_by(username="admin").first()
            self.assertTrue(check_password_hash(user.password_hash, "yeni-sifre"))
            self.assertFalse(check_password_hash(user.password_hash, "123456"))
            self.assertTrue(user.is_active)

    def test_password_is_stored_as_given(self):
        with self.app.app_context():
            set_user_password(db.session, "admin", " boşluklu şifre ", method=TEST_METHOD)
            db.session.commit()

            user = db.session.query(User).filter_by(username="admin").first()
            self.assertTrue(check_password_hash(user.password_hash, " boşluklu şifre "))
            self.assertFalse(check_password_hash(user.password_hash, "boşluklu şifre"))

    def test_unknown_user_or_empty_password(self):
        with self.app.app_context():
            with self.assertRaises(CredentialError):
                set_user_password(db.session, "yok", "sifre", method=TEST_METHOD)
            with self.assertRaises(CredentialError):
                set_user_password(db.session, "admin", "   ", method=TEST_METHOD)


if __name__ == "__main__":
    unittest.main()
