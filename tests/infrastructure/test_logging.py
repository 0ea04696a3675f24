"""Tests for structured logging."""

import json
import logging

import pytest

from hexbin.infrastructure.logging import (
    LoggingContext, StructuredLogger, get_logger, log_operation, run_context, setup_logging,
    stage_context
)
from hexbin.infrastructure.logging.formatters import HumanFormatter, JsonFormatter
from hexbin.config import config


class TestStructuredLogger:

    def test_get_logger_is_cached(self):
        logger = get_logger('hexbin.tests.cached')

        assert isinstance(logger, StructuredLogger)
        assert get_logger('hexbin.tests.cached') is logger

    def test_context_attached_to_records(self, caplog):
        logger = get_logger('hexbin.tests.context')
        caplog.set_level(logging.DEBUG, logger='hexbin')

        token = run_context.set('run-123')
        try:
            logger.info("hello", extra={'context': {'cells': 4}})
        finally:
            run_context.reset(token)

        record = caplog.records[-1]
        assert record.context['run_id'] == 'run-123'
        assert record.context['cells'] == 4

    def test_log_performance(self, caplog):
        logger = get_logger('hexbin.tests.performance')
        caplog.set_level(logging.INFO, logger='hexbin')

        logger.log_performance('index', 2.0, items_processed=100)

        performance = caplog.records[-1].performance
        assert performance['operation'] == 'index'
        assert performance['items_per_second'] == 50.0

    def test_log_error_with_context(self, caplog):
        logger = get_logger('hexbin.tests.errors')
        caplog.set_level(logging.ERROR, logger='hexbin')

        try:
            raise ValueError("bad value")
        except ValueError as e:
            logger.log_error_with_context(e, operation='parse', row=7)

        record = caplog.records[-1]
        assert record.context['error_type'] == 'ValueError'
        assert record.context['operation'] == 'parse'
        assert 'bad value' in record.traceback


class TestLoggingContext:

    def test_stage_sets_and_resets_context(self):
        ctx = LoggingContext(run_id='run-1')

        with ctx.pipeline('hexbin'):
            assert run_context.get() == 'run-1'
            with ctx.stage('spatial_filter'):
                assert stage_context.get() == 'spatial_filter'
            assert stage_context.get() is None

        assert run_context.get() is None
        assert 'spatial_filter' in ctx.timings
        assert 'pipeline_hexbin' in ctx.timings

    def test_stage_timing_recorded_on_failure(self):
        ctx = LoggingContext()

        with pytest.raises(RuntimeError):
            with ctx.stage('broken'):
                raise RuntimeError("fail")

        assert 'broken' in ctx.timings
        assert stage_context.get() is None


class TestLogOperation:

    def test_errors_logged_and_reraised(self, caplog):
        caplog.set_level(logging.DEBUG, logger='hexbin')

        @log_operation('explode')
        def explode():
            raise KeyError('missing')

        with pytest.raises(KeyError):
            explode()

    def test_returns_result(self):
        @log_operation(log_args=True)
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == 'add'


class TestFormatters:

    def _record(self):
        record = logging.LogRecord('hexbin.test', logging.INFO, __file__, 1, 'message %s', ('x',), None)
        record.context = {'run_id': 'abc', 'stage': 'palette'}
        record.performance = {'operation': 'palette', 'duration_seconds': 0.5}
        record.traceback = None
        return record

    def test_json_formatter(self):
        data = json.loads(JsonFormatter().format(self._record()))

        assert data['message'] == 'message x'
        assert data['context']['stage'] == 'palette'
        assert data['performance']['duration_seconds'] == 0.5

    def test_human_formatter(self):
        text = HumanFormatter(use_colors=False).format(self._record())

        assert 'message x' in text
        assert 'INFO' in text


class TestSetupLogging:

    def test_file_handler_writes_json(self, tmp_path):
        log_file = tmp_path / 'hexbin.log'
        setup_logging(config, log_file=str(log_file), console=False, log_level='DEBUG')
        try:
            get_logger('hexbin.tests.setup').info("written to file")
            for handler in logging.getLogger('hexbin').handlers:
                handler.flush()

            lines = [json.loads(line) for line in log_file.read_text().splitlines() if line]
            assert any(line['message'] == 'written to file' for line in lines)
        finally:
            root = logging.getLogger('hexbin')
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
