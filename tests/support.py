"""Shared fixtures for API tests: fresh in-memory schema per test, user/token helpers."""

import shutil
import tempfile
import unittest
from typing import Any

from fastapi.testclient import TestClient

from runners_api.core.database import SessionLocal, engine
from runners_api.core.security import create_access_token, hash_password
from runners_api.core.timeutil import utcnow
from runners_api.main import app
from runners_api.models import Base, User
from runners_api.services.storage import LocalStorageProvider, get_storage

DEFAULT_PASSWORD = "Str0ng!pw"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32
GIF_BYTES = b"GIF89a" + b"\x00" * 32
WEBP_BYTES = b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 32


class ApiTestCase(unittest.TestCase):
    """Creates all tables before each test and drops them afterwards."""

    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.upload_dir = tempfile.mkdtemp(prefix="runners-test-")
        self.storage = LocalStorageProvider(self.upload_dir, "http://testserver", "/api/v1")
        app.dependency_overrides[get_storage] = lambda: self.storage
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        shutil.rmtree(self.upload_dir, ignore_errors=True)

    def make_user(
        self,
        email: str = "parent@example.com",
        role: str = "user",
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
        **fields: Any,
    ) -> User:
        """Insert a user directly and return a detached copy."""
        with SessionLocal() as db:
            user = User(
                email=email,
                password_hash=hash_password(password),
                first_name=fields.pop("first_name", "Pat"),
                last_name=fields.pop("last_name", "Doe"),
                role=role,
                is_active=is_active,
                is_email_verified=False,
                is_phone_verified=False,
                failed_login_attempts=0,
                created_at=utcnow(),
                **fields,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            db.expunge(user)
            return user

    def auth(self, user: User) -> dict[str, str]:
        token, _ = create_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    def get_row(self, model: type, row_id: int) -> Any:
        with SessionLocal() as db:
            row = db.get(model, row_id)
            if row is not None:
                db.expunge(row)
            return row

    def count_rows(self, model: type, *criteria: Any) -> int:
        with SessionLocal() as db:
            return db.query(model).filter(*criteria).count()

    def create_runner(self, user: User, **overrides: Any) -> dict:
        body = {"name": "Sam Runner", "dateOfBirth": "2012-05-04", "gender": "Male"}
        body.update(overrides)
        response = self.client.post("/api/v1/runners", json=body, headers=self.auth(user))
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
