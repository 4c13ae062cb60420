"""
Tests for log redaction.
"""
from app.core.logging_config import sanitize_log_data


def test_sanitize_redacts_sensitive_keys():
    data = {"authorization": "Bearer abc", "password": "hunter2", "status": "applied"}

    sanitized = sanitize_log_data(data)

    assert sanitized["authorization"] == "***REDACTED***"
    assert sanitized["password"] == "***REDACTED***"
    assert sanitized["status"] == "applied"
    assert data["authorization"] == "Bearer abc"
