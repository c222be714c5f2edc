"""
Tests for log setup and payload sanitizing.
"""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from wagehire.core.logging_config import REDACTED, mask_contact, sanitize_log_data, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_registration_payload_is_sanitized():
    payload = {
        "email": "carol@example.com",
        "password": "Str0ng!Pass",
        "name": "Carol Candidate",
        "phone": "+1 555 0100",
        "experience_years": 4,
    }

    sanitized = sanitize_log_data(payload)

    assert sanitized == {
        "email": "c***@example.com",
        "password": REDACTED,
        "name": "Carol Candidate",
        "phone": "***00",
        "experience_years": 4,
    }
    assert payload["password"] == "Str0ng!Pass"


def test_nested_values_are_sanitized():
    sanitized = sanitize_log_data({"user": {"interviewer_email": "x@acme.io", "reset_token": "abc"}})
    assert sanitized == {"user": {"interviewer_email": "x***@acme.io", "reset_token": REDACTED}}


def test_mask_contact_leaves_empty_values():
    assert mask_contact(None) is None
    assert mask_contact("") == ""


def test_console_only_without_log_dir(restore_root_logger):
    root = setup_logging("debug", log_dir="")

    assert root.level == logging.DEBUG
    assert not any(isinstance(handler, RotatingFileHandler) for handler in root.handlers)
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_file_handler_with_log_dir(tmp_path, restore_root_logger):
    root = setup_logging("nonsense", log_dir=str(tmp_path / "logs"))

    assert root.level == logging.INFO
    assert (tmp_path / "logs").is_dir()
    assert any(isinstance(handler, RotatingFileHandler) for handler in root.handlers)
