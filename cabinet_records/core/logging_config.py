"""Log output for the records core: one JSON object per line, or plain text.

Context passed through ``extra=`` (record_id, cabinet_id, file_name, ...)
becomes top-level keys of the JSON object. Storage and database credentials
are scrubbed from the rendered message before any formatter sees it.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Optional

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Libraries that log every request or statement at INFO.
_CHATTY_LOGGERS = ("sqlalchemy.engine", "botocore", "boto3", "urllib3")

_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in entry
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


_REDACTED = "***REDACTED***"

_CREDENTIAL_PATTERNS = (
    # r2_secret_access_key=..., aws_access_key_id: ..., password=...
    re.compile(
        r"(?i)((?:r2_|aws_)?(?:secret_access_key|access_key_id|secret|password|token)\s*[=:]\s*)[^\s,'\"]{8,}"
    ),
    # Presigned object URLs
    re.compile(r"(?i)(X-Amz-(?:Signature|Credential|Security-Token)=)[^&\s]+"),
    # user:password@ in database URLs
    re.compile(r"([a-z][a-z0-9+]*://[^:/@\s]+:)[^@\s]+(?=@)"),
)


def _scrub(text: str) -> str:
    for pattern in _CREDENTIAL_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + _REDACTED, text)
    return text


class _SecretFilter(logging.Filter):
    """Render the message with its args, then scrub credentials from it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = _scrub(record.getMessage())
        record.args = ()
        if record.exc_text:
            record.exc_text = _scrub(record.exc_text)
        return True


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install a single stdout handler on the root logger.

    ``log_format`` is ``"json"`` (default) or ``"text"``; ``log_level``
    defaults to INFO. Calling it again replaces the previous handler.
    """
    level = (log_level or "INFO").upper()
    output = (log_format or "json").lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_SecretFilter())
    handler.setFormatter(
        _JsonFormatter() if output == "json" else logging.Formatter(_TEXT_FORMAT, "%Y-%m-%d %H:%M:%S")
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured", extra={"level": level, "format": output})
