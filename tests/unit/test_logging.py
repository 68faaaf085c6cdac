# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from registrar.core.config.settings import Settings
from registrar.utils.logging import (
    add_enrollment_key,
    bind_context,
    bound_enrollment_key,
    clear_context,
    setup_logging,
)


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Put the root logger and structlog back the way the test found them."""
    root = logging.getLogger()
    package = logging.getLogger("registrar")
    handlers, level, package_level = root.handlers[:], root.level, package.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    package.setLevel(package_level)
    structlog.reset_defaults()
    clear_context()


class TestAddEnrollmentKey:
    """Tests for the enrollment key processor."""

    def test_joins_course_and_semester(self):
        event = add_enrollment_key(None, "info", {"course_id": "c1", "semester_id": "s1"})

        assert event["enrollment_key"] == "c1/s1"

    def test_needs_both_ids(self):
        event = add_enrollment_key(None, "info", {"course_id": "c1"})

        assert "enrollment_key" not in event


class TestBoundEnrollmentKey:
    """Tests for bound_enrollment_key."""

    def test_restores_outer_key(self, restore_logging):
        with bound_enrollment_key("c1", "s1"):
            with bound_enrollment_key("c2", "s2"):
                inner = dict(structlog.contextvars.get_contextvars())
            outer = dict(structlog.contextvars.get_contextvars())

        assert inner["course_id"] == "c2"
        assert outer["course_id"] == "c1"
        assert "course_id" not in structlog.contextvars.get_contextvars()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_stdlib_records_rendered_as_json_with_context(self, restore_logging, capsys):
        setup_logging(Settings(environment="staging", debug=False, log_level="INFO"))
        bind_context(request_id="req-1")

        with bound_enrollment_key("c1", "s1"):
            logging.getLogger("registrar.domains.capacity").info(
                "Released seat: active=%d/%d", 1, 30
            )

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "Released seat: active=1/30"
        assert record["logger"] == "registrar.domains.capacity"
        assert record["level"] == "info"
        assert record["request_id"] == "req-1"
        assert record["enrollment_key"] == "c1/s1"

    def test_debug_suppressed_at_info(self, restore_logging, capsys):
        setup_logging(Settings(environment="staging", debug=False, log_level="INFO"))

        logging.getLogger("registrar.domains.waitlist").debug("walk started")

        assert "walk started" not in capsys.readouterr().out
