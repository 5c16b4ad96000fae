"""
Unit Tests for request logging
Tests for: log levels by status, middleware routing through log_request
"""
import logging

import pytest
from httpx import AsyncClient

from app.core.logging_config import logger


def _request_records(caplog):
    return [r for r in caplog.records if getattr(r, "event_type", None) == "http_request"]


class TestLogRequest:

    @pytest.mark.parametrize("status_code,level", [
        (200, logging.INFO),
        (404, logging.WARNING),
        (503, logging.ERROR),
    ])
    def test_level_follows_status(self, caplog, status_code, level):
        with caplog.at_level(logging.DEBUG, logger="roomroster"):
            logger.log_request("GET", "/api/rooms", status_code, 12.5)

        record = _request_records(caplog)[-1]
        assert record.levelno == level
        assert record.http_status == status_code
        assert record.duration_ms == 12.5


class TestMiddlewareLogging:

    async def test_completed_request_is_logged(self, client: AsyncClient, caplog):
        with caplog.at_level(logging.DEBUG, logger="roomroster"):
            await client.get("/api/rooms/missing")

        records = [r for r in _request_records(caplog) if r.http_path == "/api/rooms/missing"]
        assert len(records) == 1
        assert records[0].http_method == "GET"
        assert records[0].http_status == 404
        assert records[0].levelno == logging.WARNING

    async def test_health_check_is_not_logged(self, client: AsyncClient, caplog):
        with caplog.at_level(logging.DEBUG, logger="roomroster"):
            await client.get("/health")

        assert not [r for r in _request_records(caplog) if r.http_path == "/health"]
