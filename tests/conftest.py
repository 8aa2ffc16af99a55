import os
import tempfile

# Point the app at a throwaway database before any quizforge module is imported
_tmpdir = tempfile.mkdtemp(prefix="quizforge-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_tmpdir, 'test.db')}")
os.environ.setdefault("REDIS_URL", "redis://127.0.0.1:1/0")

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="session")
def client():
    from quizforge.main import app

    with TestClient(app) as c:
        yield c
