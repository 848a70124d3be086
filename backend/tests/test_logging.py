"""
Tests for the log processors.
"""

from eventgate.core.logging import service_context


def test_service_context_stamps_entries():
    add_context = service_context("Event Admission API", "test")
    entry = add_context(None, "info", {"event": "registration_created", "event_id": 3})

    assert entry["service"] == "Event Admission API"
    assert entry["environment"] == "test"
    assert entry["event_id"] == 3


def test_service_context_keeps_explicit_fields():
    add_context = service_context("Event Admission API", "test")
    entry = add_context(None, "info", {"event": "x", "service": "worker"})
    assert entry["service"] == "worker"
