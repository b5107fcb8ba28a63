"""
Tests for site settings: WhatsApp number validation, secret encryption and the admin API.
Run with: pytest tests/test_settings.py -v
"""

import sqlite3

import pytest

from vitrine.modules.settings.database import (
    decrypt_value,
    encrypt_value,
    get_all_settings,
    get_setting,
    set_setting,
    validate_whatsapp_number,
)
from vitrine.modules.settings.helpers import get_brand_name, get_whatsapp_number, is_cloud_storage

API = "/admin/settings/api/settings"


# ---------------------------------------------------------------------------
# WhatsApp number validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value,expected", [
    ("+1234567890", "+1234567890"),
    ("919137106851", "919137106851"),
    ("  +447911123456  ", "+447911123456"),
])
def test_valid_whatsapp_numbers(value, expected):
    assert validate_whatsapp_number(value) == expected


@pytest.mark.parametrize("value,message", [
    ("", "WhatsApp number is required"),
    ("   ", "WhatsApp number is required"),
    (None, "WhatsApp number is required"),
    ("+1234567890123456", "Phone number too long"),
    ("+0123456789", "Invalid phone number format"),
    ("12-34-56", "Invalid phone number format"),
    ("+1", "Invalid phone number format"),
])
def test_invalid_whatsapp_numbers(value, message):
    with pytest.raises(ValueError, match=message):
        validate_whatsapp_number(value)


# ---------------------------------------------------------------------------
# Storage and encryption
# ---------------------------------------------------------------------------

def test_encrypt_round_trip_inside_app(app):
    with app.app_context():
        token = encrypt_value("s3cret-key")
        assert token != "s3cret-key"
        assert decrypt_value(token) == "s3cret-key"


def test_decrypt_plaintext_is_passthrough(app):
    with app.app_context():
        assert decrypt_value("stored-before-encryption") == "stored-before-encryption"


def test_secret_settings_are_encrypted_at_rest(app):
    with app.app_context():
        assert set_setting("DO_SPACES_SECRET", "abcdefgh1234", category="storage", is_secret=True)
        assert get_setting("DO_SPACES_SECRET") == "abcdefgh1234"

        with sqlite3.connect(app.config["SETTINGS_DB"]) as conn:
            raw = conn.execute("SELECT value FROM settings WHERE key = 'DO_SPACES_SECRET'").fetchone()[0]
        assert raw != "abcdefgh1234"

        masked = {s["key"]: s["value"] for s in get_all_settings()}
        assert masked["DO_SPACES_SECRET"] == "********1234"
        unmasked = {s["key"]: s["value"] for s in get_all_settings(mask_secrets=False)}
        assert unmasked["DO_SPACES_SECRET"] == "abcdefgh1234"


def test_get_setting_falls_back_to_environment(app, monkeypatch):
    monkeypatch.setenv("WHATSAPP_NUMBER", "+15550001111")
    with app.app_context():
        assert get_whatsapp_number() == "+15550001111"
        set_setting("WHATSAPP_NUMBER", "+15552223333", category="contact")
        assert get_whatsapp_number() == "+15552223333"


def test_helpers_defaults(app):
    with app.app_context():
        assert get_whatsapp_number("fallback") == "fallback"
        assert not is_cloud_storage()
        assert get_brand_name() == "Vitrine"
        set_setting("BRAND_NAME", "Acme Studio", category="site")
        assert get_brand_name() == "Acme Studio"


# ---------------------------------------------------------------------------
# Admin API
# ---------------------------------------------------------------------------

def test_settings_api_requires_admin(client):
    assert client.get(API).status_code == 401
    assert client.post(API, json={"key": "WHATSAPP_NUMBER", "value": "+1234567890"}).status_code == 401


def test_save_whatsapp_number_via_api(app, admin_client):
    response = admin_client.post(API, json={"key": "WHATSAPP_NUMBER", "value": " +1234567890 "})
    assert response.status_code == 200

    with app.app_context():
        assert get_setting("WHATSAPP_NUMBER") == "+1234567890"

    settings = admin_client.get(API).get_json()["settings"]
    assert {s["key"]: s["value"] for s in settings}["WHATSAPP_NUMBER"] == "+1234567890"


@pytest.mark.parametrize("value,error", [
    ("", "WhatsApp number is required"),
    ("1234567890123456", "Phone number too long"),
    ("abc", "Invalid phone number format. Use international format (e.g., +1234567890)"),
])
def test_save_invalid_whatsapp_number_via_api(admin_client, value, error):
    response = admin_client.post(API, json={"key": "WHATSAPP_NUMBER", "value": value})
    assert response.status_code == 400
    assert response.get_json()["error"] == error


def test_save_unknown_key_via_api(admin_client):
    response = admin_client.post(API, json={"key": "NOT_A_SETTING", "value": "x"})
    assert response.status_code == 400
    assert admin_client.post(API, json={}).status_code == 400


def test_delete_setting_via_api(admin_client):
    admin_client.post(API, json={"key": "BRAND_NAME", "value": "Acme Studio"})
    assert admin_client.delete(f"{API}/BRAND_NAME").status_code == 200
    assert admin_client.delete(f"{API}/BRAND_NAME").status_code == 404


def test_settings_form_skips_masked_secret(app, admin_client):
    with app.app_context():
        set_setting("DO_SPACES_SECRET", "original-secret", category="storage", is_secret=True)

    response = admin_client.post("/admin/settings/save", data={
        "DO_SPACES_SECRET": "***********cret",
        "BRAND_NAME": "Form Studio",
    })
    assert response.status_code == 302

    with app.app_context():
        assert get_setting("DO_SPACES_SECRET") == "original-secret"
        assert get_setting("BRAND_NAME") == "Form Studio"


def test_settings_form_rejects_bad_whatsapp_number(app, admin_client):
    response = admin_client.post("/admin/settings/save", data={"WHATSAPP_NUMBER": "nope"},
                                 follow_redirects=True)
    assert response.status_code == 200
    assert b"Invalid phone number format" in response.data
    with app.app_context():
        assert get_setting("WHATSAPP_NUMBER") is None


def test_settings_page_renders(admin_client):
    response = admin_client.get("/admin/settings/")
    assert response.status_code == 200
    assert b"WhatsApp Number" in response.data
