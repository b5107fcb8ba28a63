"""
Shared fixtures: a fully initialised app backed by throwaway SQLite files.
"""

import io
import os
import shutil
import tempfile

import pytest
from flask import Flask

from vitrine import Vitrine


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="vitrine-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir, monkeypatch):
    """Flask app with every Vitrine module registered."""
    monkeypatch.delenv("STORAGE_TYPE", raising=False)
    monkeypatch.delenv("WHATSAPP_NUMBER", raising=False)

    app = Flask(__name__, static_folder=os.path.join(tmp_db_dir, "static"))
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    Vitrine(app, {"brand_name": "Test Portfolio"})
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    """Test client with an admin session already established."""
    with client.session_transaction() as sess:
        sess["admin_id"] = 1
        sess["admin_email"] = "admin@example.com"
    return client


@pytest.fixture
def image_file():
    """Factory for in-memory image uploads in the shape the test client expects."""
    def _make(name="photo.png", payload=b"\x89PNG\r\n\x1a\nfake"):
        return (io.BytesIO(payload), name)
    return _make


@pytest.fixture
def make_project(admin_client):
    """Create a project through the admin API and return its id."""
    def _make(**overrides):
        body = {
            "title": "E-commerce Platform",
            "description": "A full-stack shop with payment integration",
            "technologies": "React, Node.js, Stripe",
            "category": "E-commerce",
            "published": True,
        }
        body.update(overrides)
        response = admin_client.post("/admin/projects/api/projects", json=body)
        assert response.status_code == 200, response.get_json()
        return response.get_json()["id"]
    return _make
