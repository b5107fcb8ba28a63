"""
Critical Integration Tests for Vitrine
======================================

Focused tests covering the integration points most likely to break.
Run with: pytest tests/test_critical.py -v

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

from flask import Flask

from vitrine import Vitrine
from vitrine.modules.dashboard.routes import create_admin_db


# ---------------------------------------------------------------------------
# 1. Initialisation -- Vitrine(app) does not raise
# ---------------------------------------------------------------------------

def test_framework_initialisation(tmp_db_dir):
    """Vitrine(app) boots without errors and stores itself on the app."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir

    vitrine = Vitrine(app)

    assert "vitrine" in app.extensions
    assert app.extensions["vitrine"] is vitrine


# ---------------------------------------------------------------------------
# 2. Config resolution -- DB paths default to files inside DB_DIR
# ---------------------------------------------------------------------------

def test_config_db_paths(app, tmp_db_dir):
    """Every database path resolves inside DB_DIR with the expected filename."""
    assert app.config["PROJECTS_DB"] == os.path.join(tmp_db_dir, "projects.db")
    assert app.config["USER_DB"] == os.path.join(tmp_db_dir, "users.db")
    assert app.config["SETTINGS_DB"] == os.path.join(tmp_db_dir, "settings.db")
    assert app.config["LOGS_DB"] == os.path.join(tmp_db_dir, "app_logs.db")
    assert app.config["MAX_IMAGE_BYTES"] == 5 * 1024 * 1024


def test_explicit_db_path_is_kept(tmp_db_dir):
    app = Flask(__name__)
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    app.config["PROJECTS_DB"] = os.path.join(tmp_db_dir, "elsewhere", "catalog.db")
    Vitrine(app)
    assert app.config["PROJECTS_DB"].endswith("catalog.db")


# ---------------------------------------------------------------------------
# 3. Blueprint registration -- every module is registered
# ---------------------------------------------------------------------------

EXPECTED_MODULES = [
    "dashboard",
    "settings",
    "projects",
    "projects_public",
]


def test_all_blueprints_registered(app):
    """All feature modules should be registered as blueprints."""
    registered = app.extensions["vitrine"].get_registered_modules()

    for mod in EXPECTED_MODULES:
        assert mod in registered, (
            f"Module '{mod}' was not registered. Registered: {registered}"
        )

    assert len(registered) == len(EXPECTED_MODULES)
    assert {"admin", "settings", "projects_admin", "projects"} <= set(app.blueprints)


def test_features_can_be_disabled(tmp_db_dir):
    app = Flask(__name__)
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = tmp_db_dir
    vitrine = Vitrine(app, {"features": {"settings": False}})

    assert "settings" not in vitrine.get_registered_modules()
    assert "settings" not in app.blueprints

    # The dashboard still renders without the settings link
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["admin_id"] = 1
    response = client.get("/admin/")
    assert response.status_code == 200
    assert b"/admin/settings/" not in response.data


# ---------------------------------------------------------------------------
# 4. Template context -- vitrine_config and brand_name are injected
# ---------------------------------------------------------------------------

def test_template_context_injection(app):
    """Context processor injects vitrine_config and brand_name."""
    with app.test_request_context("/"):
        ctx = {}
        for func in app.template_context_processors[None]:
            ctx.update(func())

        assert isinstance(ctx["vitrine_config"], dict)
        assert ctx["brand_name"] == "Test Portfolio"


def test_template_helpers_registered(app):
    """Filters and globals used by the public templates must exist on the app."""
    assert callable(app.jinja_env.filters["whatsapp_url"])
    assert callable(app.jinja_env.globals["toggle_category"])


# ---------------------------------------------------------------------------
# 5. Database directory creation
# ---------------------------------------------------------------------------

def test_database_dir_creation():
    """_setup_database_dir creates the configured DB_DIR on disk."""
    d = tempfile.mkdtemp(prefix="vitrine-dbtest-")
    target = os.path.join(d, "sub", "databases")

    try:
        app = Flask(__name__)
        app.config["TESTING"] = True
        app.config["SECRET_KEY"] = "test-secret"
        app.config["DB_DIR"] = target

        Vitrine(app)

        assert os.path.isdir(target), f"DB_DIR was not created at {target}"
    finally:
        shutil.rmtree(d, ignore_errors=True)


# ---------------------------------------------------------------------------
# 6. Admin auth guard -- unauthenticated admin pages redirect to login
# ---------------------------------------------------------------------------

def test_admin_auth_redirect(client):
    """Unauthenticated GET to admin pages should redirect to login."""
    for path in ("/admin/", "/admin/settings/", "/admin/projects/new"):
        response = client.get(path, follow_redirects=False)
        assert response.status_code == 302, (
            f"Expected 302 redirect for {path}, got {response.status_code}"
        )
        assert "/admin/login" in response.headers.get("Location", "")


def test_status_endpoint(admin_client):
    response = admin_client.get("/admin/status")
    assert response.get_json() == {"logged_in": True, "admin_email": "admin@example.com"}


# ---------------------------------------------------------------------------
# 7. Admin accounts -- first admin, login and logout
# ---------------------------------------------------------------------------

def test_first_admin_can_be_created_without_login(client):
    response = client.post("/admin/create-admin", data={
        "email": "Owner@Example.com",
        "password": "hunter22",
        "confirm_password": "hunter22",
    })
    assert response.status_code == 302
    assert "/admin/login" in response.headers["Location"]

    # Once an admin exists the page is closed to anonymous visitors
    response = client.get("/admin/create-admin")
    assert response.status_code == 302


def test_create_admin_validation(client):
    response = client.post("/admin/create-admin", data={
        "email": "owner@example.com", "password": "abc", "confirm_password": "abc",
    })
    assert response.status_code == 400
    response = client.post("/admin/create-admin", data={
        "email": "owner@example.com", "password": "abcdef", "confirm_password": "abcdeg",
    })
    assert response.status_code == 400


def test_login_flow(app, client):
    with app.app_context():
        create_admin_db("owner@example.com", "hunter22")

    response = client.post("/admin/login", data={"email": "owner@example.com", "password": "wrong"})
    assert response.status_code == 401

    response = client.post("/admin/login", data={"email": "", "password": ""})
    assert response.status_code == 400

    response = client.post("/admin/login?next=/admin/settings/",
                           data={"email": "OWNER@example.com", "password": "hunter22"})
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/admin/settings/")

    assert client.get("/admin/").status_code == 200

    client.get("/admin/logout")
    assert client.get("/admin/").status_code == 302


def test_login_ignores_external_next(app, client):
    with app.app_context():
        create_admin_db("owner@example.com", "hunter22")

    response = client.post("/admin/login?next=//evil.example.com/",
                           data={"email": "owner@example.com", "password": "hunter22"})
    location = response.headers["Location"]
    assert "evil.example.com" not in location
    assert location.startswith("/admin")


# ---------------------------------------------------------------------------
# 8. Public pages
# ---------------------------------------------------------------------------

def test_public_pages_render_when_empty(client):
    assert client.get("/").status_code == 200
    assert client.get("/projects/").status_code == 200
    assert client.get("/projects/api/projects").get_json() == []


def test_public_catalog_only_shows_published(client, make_project):
    shown = make_project(title="Shop Front", image_urls=["/static/projects/a.jpg"])
    make_project(title="Secret Draft", published=False)

    body = client.get("/").data
    assert b"Shop Front" in body
    assert b"Secret Draft" not in body

    projects = client.get("/projects/api/projects").get_json()
    assert [p["id"] for p in projects] == [shown]


def test_public_api_filters(client, make_project):
    make_project(title="Shop Front", category="E-commerce")
    ml = make_project(title="Price Predictor", category="Machine Learning",
                      technologies="Python, scikit-learn")

    projects = client.get("/projects/api/projects?category=Machine%20Learning").get_json()
    assert [p["id"] for p in projects] == [ml]

    projects = client.get("/projects/api/projects?q=PYTHON").get_json()
    assert [p["id"] for p in projects] == [ml]

    projects = client.get("/projects/?q=shop&category=E-commerce&category=IoT")
    assert b"Shop Front" in projects.data
    assert b"Price Predictor" not in projects.data


def test_project_detail_has_quote_link(client, make_project):
    project_id = make_project(title="Shop Front", image_urls=["/static/a.jpg", "/static/b.jpg"])

    response = client.get(f"/projects/{project_id}")
    assert response.status_code == 200
    assert b"https://wa.me/919137106851?text=" in response.data
    assert b"Shop%20Front" in response.data
    assert response.data.count(b"<img ") == 2


def test_unpublished_project_detail_redirects(client, make_project):
    draft = make_project(published=False)
    for project_id in (draft, 999):
        response = client.get(f"/projects/{project_id}")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/projects/")


# ---------------------------------------------------------------------------
# 9. Logging -- admin actions land in the app_logs table
# ---------------------------------------------------------------------------

def test_admin_actions_are_logged(app, make_project):
    from vitrine.core.logging_service import LoggingService

    project_id = make_project()

    with app.app_context():
        logs = LoggingService.get_recent_logs(source="projects")
        assert logs[0]["message"] == f"User action: created project {project_id}"
        assert logs[0]["user_id"] == "admin@example.com"
        assert logs[0]["request_path"] == "/admin/projects/api/projects"

        assert LoggingService.cleanup_old_logs(days_to_keep=30) == 0
