"""Tests for structured logging utilities."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

from rpc_proxy.utils.logging import (  # noqa: E402
    StructuredLogFormatter,
    clear_request_context,
    get_logger,
    log_lambda_event,
    log_response,
    mask_endpoint,
    set_request_context,
)


class TestMaskEndpoint:
    """Tests for mask_endpoint function."""

    @pytest.mark.parametrize(
        ('url', 'expected'),
        [
            ('https://mainnet.infura.io/v3/abc123', 'https://mainnet.infura.io/***'),
            ('https://eth.example.com:8545/?apikey=abc', 'https://eth.example.com:8545/***'),
            ('http://localhost:8545', 'http://localhost:8545/***'),
            ('', '***'),
            (None, '***'),
            ('not a url', '***'),
        ],
    )
    def test_masks_path_and_query(self, url, expected) -> None:
        assert mask_endpoint(url) == expected


def _record(msg: str = 'hello', **attrs) -> logging.LogRecord:
    record = logging.LogRecord('rpc_proxy.test', logging.INFO, __file__, 10, msg, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestStructuredLogFormatter:
    """Tests for StructuredLogFormatter."""

    def teardown_method(self) -> None:
        clear_request_context()

    def test_formats_json(self) -> None:
        data = json.loads(StructuredLogFormatter().format(_record()))
        assert data['level'] == 'INFO'
        assert data['logger'] == 'rpc_proxy.test'
        assert data['message'] == 'hello'
        assert data['source']['line'] == 10

    def test_includes_request_context(self) -> None:
        set_request_context(req_id='req-1', corr_id='corr-1')
        data = json.loads(StructuredLogFormatter().format(_record()))
        assert data['request_id'] == 'req-1'
        assert data['correlation_id'] == 'corr-1'

    def test_omits_cleared_context(self) -> None:
        set_request_context(req_id='req-1')
        clear_request_context()
        data = json.loads(StructuredLogFormatter().format(_record()))
        assert 'request_id' not in data

    def test_includes_extra(self) -> None:
        data = json.loads(StructuredLogFormatter().format(_record(extra={'status_code': 502})))
        assert data['extra'] == {'status_code': 502}

    def test_includes_exception(self) -> None:
        try:
            raise ValueError('bad body')
        except ValueError:
            record = _record(exc_info=sys.exc_info())
        data = json.loads(StructuredLogFormatter().format(record))
        assert data['exception']['type'] == 'ValueError'
        assert data['exception']['message'] == 'bad body'


class TestContextLogger:
    """Tests for get_logger and the log helpers."""

    def test_nests_extra_fields(self, caplog) -> None:
        caplog.set_level(logging.INFO)
        logger = get_logger('rpc_proxy.test', component='proxy')

        logger.info('forwarded', extra={'body_length': 12})

        record = caplog.records[-1]
        assert record.extra == {'body_length': 12, 'component': 'proxy'}

    def test_log_response_level_follows_status(self, caplog) -> None:
        caplog.set_level(logging.INFO)
        logger = get_logger('rpc_proxy.test')

        log_response(logger, 200, 1.234)
        log_response(logger, 502)

        assert caplog.records[-2].levelno == logging.INFO
        assert caplog.records[-2].extra == {'response': {'status_code': 200, 'duration_ms': 1.23}}
        assert caplog.records[-1].levelno == logging.WARNING

    def test_log_lambda_event_omits_body(self, caplog) -> None:
        caplog.set_level(logging.DEBUG)
        logger = get_logger('rpc_proxy.test')

        log_lambda_event(logger, {'httpMethod': 'POST', 'body': '{"secret":1}'})

        event_data = caplog.records[-1].extra['event']
        assert event_data['http_method'] == 'POST'
        assert event_data['body_length'] == 12
        assert 'secret' not in caplog.text
