"""
Tests for logging configuration
"""
import structlog

from src.buyerleads.utils.logger import (
    bind_request_context,
    clear_request_context,
    mask_contact,
    mask_contact_fields,
)


class TestContactMasking:
    """Tests for phone and email masking."""

    def test_phone_keeps_last_digits(self):
        assert mask_contact("9876543210") == "******3210"

    def test_short_value_unchanged(self):
        assert mask_contact("123") == "123"

    def test_email_keeps_domain(self):
        assert mask_contact("rajesh.kumar@email.com") == "r***@email.com"

    def test_processor_masks_contact_keys_only(self):
        """Test that only phone and email keys are rewritten"""
        event = {
            "event": "buyer_created",
            "phone": "9876543210",
            "email": "owner@example.com",
            "buyer_id": "b-1",
        }

        result = mask_contact_fields(None, "info", event)

        assert result == {
            "event": "buyer_created",
            "phone": "******3210",
            "email": "o***@example.com",
            "buyer_id": "b-1",
        }

    def test_processor_ignores_missing_and_empty(self):
        event = {"event": "buyer_deleted", "email": "", "phone": None}

        assert mask_contact_fields(None, "info", dict(event)) == event


class TestRequestContext:
    """Tests for per-request context binding."""

    def teardown_method(self):
        clear_request_context()

    def test_binds_given_request_id(self):
        request_id = bind_request_context("req-42", path="/api/v1/buyers/")

        assert request_id == "req-42"
        assert structlog.contextvars.get_contextvars() == {
            "request_id": "req-42",
            "path": "/api/v1/buyers/",
        }

    def test_generates_request_id(self):
        first = bind_request_context()
        second = bind_request_context()

        assert first and second and first != second
        assert structlog.contextvars.get_contextvars() == {"request_id": second}

    def test_clear(self):
        bind_request_context("req-1")
        clear_request_context()

        assert structlog.contextvars.get_contextvars() == {}
