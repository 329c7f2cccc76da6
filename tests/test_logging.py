"""
Tests for structured log output
"""

import json
import logging

from uplift_worker.core.logging import ConsoleFormatter, JSONFormatter, get_logger


def make_record(**fields):
    record = logging.LogRecord(
        name="uplift_worker.domains.learning.jobs.base",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="Finished daily_learning",
        args=(),
        exc_info=None,
    )
    record.fields = fields
    return record


class TestFormatters:
    def test_json_formatter_lifts_fields(self):
        line = JSONFormatter().format(make_record(shop_id="a.myshopify.com", analyzed=3, skipped=None))

        entry = json.loads(line)
        assert entry["message"] == "Finished daily_learning"
        assert entry["shop_id"] == "a.myshopify.com"
        assert entry["analyzed"] == 3
        assert "skipped" not in entry

    def test_console_formatter_renders_key_values(self):
        line = ConsoleFormatter(use_colors=False).format(
            make_record(status="partial", message_text="two words")
        )

        assert line.endswith('Finished daily_learning | status=partial | message_text="two words"')

    def test_structured_logger_attaches_fields(self, caplog):
        logger = get_logger("uplift_worker.tests")

        with caplog.at_level(logging.INFO, logger="uplift_worker.tests"):
            logger.info("Scored products", shop_id="a.myshopify.com", analyzed=2)

        record = caplog.records[-1]
        assert record.getMessage() == "Scored products"
        assert record.fields == {"shop_id": "a.myshopify.com", "analyzed": 2}
