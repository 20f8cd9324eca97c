import json
import logging
import sys
import traceback
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from domain.models.pricing import ConversionRate

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'


class PricingJSONEncoder(json.JSONEncoder):
    """Rates are Decimals and timestamps are datetimes; both go out as strings."""

    def default(self, o):
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Structured context passed as `extra={"extra_data": {...}}` (see
    `rate_context`) is emitted under "data".
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, UTC).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f'{record.module}.{record.funcName}:{record.lineno}',
        }

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        data = getattr(record, 'extra_data', None)
        if data is not None:
            log_entry['data'] = data

        return json.dumps(log_entry, ensure_ascii=False, cls=PricingJSONEncoder)


def rate_context(rate: ConversionRate, **context) -> dict[str, dict]:
    """`extra=` payload describing a resolved rate."""
    return {
        'extra_data': {
            'pair': f'{rate.from_currency}/{rate.to_currency}',
            'rate': rate.rate,
            'observed_at': rate.observed_at,
            'source_label': rate.source_label,
            **context,
        }
    }


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Install a single stdout handler on the root logger."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(handler)
