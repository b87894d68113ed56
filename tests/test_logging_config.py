"""Tests for structured logging and mandate log context."""
from __future__ import annotations

import json
import logging

import pytest

from sardis_mandates.logging_config import (
    LogContext,
    MandateContextFilter,
    StructuredFormatter,
    mandate_id_var,
    role_var,
    setup_logging,
)


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message="hello", **extra):
    record = logging.LogRecord("sardis_mandates.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    def test_sets_and_restores(self):
        with LogContext(mandate_id="mdt_1", role="client"):
            assert mandate_id_var.get() == "mdt_1"
            assert role_var.get() == "client"
            with LogContext(role="server"):
                assert mandate_id_var.get() == "mdt_1"
                assert role_var.get() == "server"
            assert role_var.get() == "client"
        assert mandate_id_var.get() is None
        assert role_var.get() is None

    def test_filter_copies_context(self):
        record = _record()
        with LogContext(mandate_id="mdt_2", role="server"):
            MandateContextFilter().filter(record)
        assert record.mandate_id == "mdt_2"
        assert record.role == "server"


class TestStructuredFormatter:
    def test_json_output(self):
        record = _record("signed", mandate_id="mdt_3", role="client", alg="eip191")
        data = json.loads(StructuredFormatter().format(record))
        assert data["message"] == "signed"
        assert data["level"] == "INFO"
        assert data["mandate_id"] == "mdt_3"
        assert data["role"] == "client"
        assert data["alg"] == "eip191"

    def test_context_omitted_when_unset(self):
        record = _record(mandate_id=None, role=None)
        data = json.loads(StructuredFormatter().format(record))
        assert "mandate_id" not in data
        assert "role" not in data


class TestSetupLogging:
    def test_json_handler(self, restore_root_logger):
        setup_logging(level="debug", json_format=True)
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_defaults_from_settings(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("MANDATE_LOG_LEVEL", "warning")
        monkeypatch.setenv("MANDATE_LOG_JSON", "false")
        setup_logging()
        root = restore_root_logger
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_log_file(self, restore_root_logger, tmp_path):
        path = tmp_path / "mandates.log"
        setup_logging(level="INFO", json_format=True, log_file=str(path))
        assert len(restore_root_logger.handlers) == 2
        for handler in restore_root_logger.handlers:
            handler.close()


class TestSigningContext:
    @pytest.mark.asyncio
    async def test_signing_records_carry_mandate_id(self, make_mandate, client_account):
        handler = _ListHandler()
        handler.addFilter(MandateContextFilter())
        package_logger = logging.getLogger("sardis_mandates")
        previous_level = package_logger.level
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)
        try:
            mandate = make_mandate()
            await mandate.sign_as_client(client_account)
            mandate.verify_role("client")
        finally:
            package_logger.removeHandler(handler)
            package_logger.setLevel(previous_level)

        assert handler.records
        assert {r.mandate_id for r in handler.records} == {mandate.mandate_id}
        assert {r.role for r in handler.records} == {"client"}
