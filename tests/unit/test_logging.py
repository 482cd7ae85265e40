"""Tests for the structlog processors."""

import json
import logging

from ecotrack.config import Settings
from ecotrack.middleware.logging import REDACTED, build_processors, redact_sensitive, service_context


def _render(settings: Settings, **event: object) -> dict:
    event_dict: dict = {"event": "test_event", **event}
    for processor in build_processors(settings):
        event_dict = processor(logging.getLogger("ecotrack.tests"), "info", event_dict)
    return json.loads(event_dict)


class TestRedaction:
    def test_credentials_masked(self):
        event = redact_sensitive(None, "info", {
            "event": "signup_failed",
            "password": "greenpass",
            "Authorization": "Bearer abc",
            "username": "sam",
        })

        assert event["password"] == REDACTED
        assert event["Authorization"] == REDACTED
        assert event["username"] == "sam"

    def test_nested_payload_masked(self):
        event = redact_sensitive(None, "info", {
            "event": "login_payload",
            "body": {"email": "sam@example.com", "password": "greenpass"},
        })

        assert event["body"] == {"email": "sam@example.com", "password": REDACTED}


class TestServiceContext:
    def test_stamps_service_and_environment(self):
        settings = Settings(_env_file=None, environment="development")
        event = service_context(settings)(None, "info", {"event": "plants_watered"})

        assert event["service"] == "ecotrack-api"
        assert event["environment"] == "development"

    def test_json_line_has_context_and_no_secret(self):
        settings = Settings(_env_file=None, log_format="json")

        line = _render(settings, user_id=7, token="eyJhbGciOi")

        assert line["event"] == "test_event"
        assert line["service"] == "ecotrack-api"
        assert line["token"] == REDACTED
        assert line["user_id"] == 7
        assert "timestamp" in line
