"""Test environment: must run before runners_api is imported (settings are read at import)."""

import os
import tempfile

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "unit-test-secret-0123456789-abcdefghij"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_UPLOAD_DIR"] = tempfile.mkdtemp(prefix="runners-uploads-")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
