"""Custom field validation against a cabinet's field schema.

Each field type has exactly one coercion function, resolved through
``_VALIDATORS``. Validation is fail-fast: the first offending field raises
and nothing is returned.

Usage:
    validated = validate_fields({"1": "Hello"}, cabinet.custom_fields)
    # {"1": {"fieldId": 1, "type": "Text Only", "value": "Hello"}}
"""

import math
import re
from email.utils import parsedate_to_datetime
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Iterable, Mapping, Union

from ..exceptions import ErrorCode, InvalidFieldValueError, MandatoryFieldMissingError
from ..schemas.field import CustomFieldDefinition, FieldType, ValidatedField

# File keys carried by an Attachment value.
ATTACHMENT_FILE_KEYS = ("fileName", "filePath", "fileSize", "fileType", "fileHash")

# Leading numeric prefix accepted for "Number Only" strings ("12.5kg" -> 12.5).
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_MISSING = object()

# Non-ISO date forms accepted verbatim, tried after ISO-8601 and RFC 2822.
_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d, %Y %H:%M:%S",
    "%b %d, %Y %H:%M:%S",
    "%d %B %Y",
    "%d %b %Y",
    "%a %b %d %Y",
    "%a %b %d %Y %H:%M:%S",
)


def _fail(field: CustomFieldDefinition, reason: str, code: ErrorCode) -> InvalidFieldValueError:
    return InvalidFieldValueError(field.name, reason, code)


def _unwrap(value: Any) -> Any:
    """Strip one ``{"value": ...}`` wrapper."""
    if isinstance(value, dict) and "value" in value:
        return value["value"]
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _numeric(num: float) -> Union[int, float]:
    return int(num) if num.is_integer() else num


def _check_limit(field: CustomFieldDefinition, text: str) -> str:
    if field.character_limit and len(text) > field.character_limit:
        raise _fail(
            field,
            f"exceeds character limit of {field.character_limit}",
            ErrorCode.CHARACTER_LIMIT_EXCEEDED,
        )
    return text


def _to_iso(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parses_as_datetime(text: str) -> bool:
    """True for ISO-8601, RFC 2822 or one of the common forms in _DATE_FORMATS."""
    text = text.strip()
    if not text:
        return False
    try:
        datetime.fromisoformat(text)
        return True
    except ValueError:
        pass
    try:
        parsedate_to_datetime(text)
        return True
    except (TypeError, ValueError, IndexError):
        pass
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
            return True
        except ValueError:
            continue
    return False


# ---------------------------------------------------------------------------
# Per-type validators
# ---------------------------------------------------------------------------

def _validate_text_with_symbols(value: Any, field: CustomFieldDefinition) -> Any:
    if value is None or value == "":
        return None
    text = _format_number(value) if _is_number(value) else value
    if not isinstance(text, str):
        raise _fail(field, "must be text, number or special symbols", ErrorCode.INVALID_TEXT)
    return _check_limit(field, text)


def _validate_text_only(value: Any, field: CustomFieldDefinition) -> Any:
    text = _unwrap(value)
    if not isinstance(text, str):
        raise _fail(field, "must be text", ErrorCode.INVALID_TEXT)
    return _check_limit(field, text)


def _validate_number(value: Any, field: CustomFieldDefinition) -> Any:
    if value is None or value == "":
        return None
    if _is_number(value):
        if math.isnan(value):
            raise _fail(field, "must be a valid number", ErrorCode.INVALID_NUMBER)
        return value
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip())
        if match:
            return _numeric(float(match.group(0)))
    raise _fail(field, "must be a valid number", ErrorCode.INVALID_NUMBER)


def _validate_currency(value: Any, field: CustomFieldDefinition) -> Any:
    if value is None or value == "":
        return None
    amount = None
    if _is_number(value):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            amount = None
    if amount is None or not math.isfinite(amount):
        raise _fail(field, "must be a valid currency amount", ErrorCode.INVALID_CURRENCY)
    return value if _is_number(value) else _numeric(amount)


def _coerce_moment(value: Any, field: CustomFieldDefinition) -> str:
    """Normalize a non-string moment to ISO-8601 UTC."""
    if isinstance(value, datetime):
        return _to_iso(value)
    if isinstance(value, date):
        return _to_iso(datetime(value.year, value.month, value.day))
    if _is_number(value) and math.isfinite(value):
        # Epoch milliseconds
        try:
            return _to_iso(datetime.fromtimestamp(value / 1000, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            pass
    raise _fail(field, "must be a valid date/time", ErrorCode.INVALID_DATETIME)


def _validate_datetime(value: Any, field: CustomFieldDefinition) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        if _parses_as_datetime(value):
            return value
        raise _fail(field, "must be a valid date/time", ErrorCode.INVALID_DATETIME)
    return _coerce_moment(value, field)


def _validate_time(value: Any, field: CustomFieldDefinition) -> Any:
    if isinstance(value, str) and not _parses_as_datetime(value):
        try:
            time.fromisoformat(value.strip())
        except ValueError:
            raise _fail(field, "must be a valid date/time", ErrorCode.INVALID_DATETIME) from None
        return value
    if isinstance(value, time):
        return value.isoformat()
    return _validate_datetime(value, field)


def _validate_yes_no(value: Any, field: CustomFieldDefinition) -> Any:
    if not isinstance(value, bool):
        raise _fail(field, "must be a boolean", ErrorCode.INVALID_BOOLEAN)
    return value


def _validate_tags(value: Any, field: CustomFieldDefinition) -> Any:
    if not isinstance(value, (list, tuple)):
        raise _fail(field, "must be an array of tags", ErrorCode.INVALID_TAGS)
    return list(value)


def attachment_info(raw: Any) -> dict:
    """Coalesce file keys from ``raw["value"]`` and sibling top-level keys."""
    if not isinstance(raw, dict):
        return {}
    inner = raw.get("value") if isinstance(raw.get("value"), dict) else {}
    info = {key: inner.get(key) or raw.get(key) for key in ATTACHMENT_FILE_KEYS}
    # Keep any extra keys the client attached to the file object.
    source = inner or raw
    for key, extra in source.items():
        if key not in info and key != "value":
            info[key] = extra
    return info


def _validate_attachment(raw: Any, field: CustomFieldDefinition) -> Any:
    if not raw or not isinstance(raw, dict):
        raise _fail(field, "must be a valid file upload", ErrorCode.MISSING_FILE_INFO)
    info = attachment_info(raw)
    if not info.get("fileName") or not info.get("filePath"):
        raise _fail(field, "is missing required file information", ErrorCode.MISSING_FILE_INFO)
    return info


_VALIDATORS: dict[FieldType, Callable[[Any, CustomFieldDefinition], Any]] = {
    FieldType.TEXT_WITH_SYMBOLS: _validate_text_with_symbols,
    FieldType.TEXT_ONLY: _validate_text_only,
    FieldType.NUMBER_ONLY: _validate_number,
    FieldType.CURRENCY: _validate_currency,
    FieldType.DATE: _validate_datetime,
    FieldType.TIME: _validate_time,
    FieldType.TIME_AND_DATE: _validate_datetime,
    FieldType.YES_NO: _validate_yes_no,
    FieldType.TAGS: _validate_tags,
    FieldType.ATTACHMENT: _validate_attachment,
}

_unhandled = set(FieldType) - set(_VALIDATORS)
if _unhandled:
    raise RuntimeError(f"No validator registered for field types: {sorted(t.value for t in _unhandled)}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _lookup(submitted: Mapping[Any, Any], field_id: Union[int, str]) -> Any:
    for key in (field_id, str(field_id)):
        if key in submitted:
            return submitted[key]
    if isinstance(field_id, str) and field_id.isdigit() and int(field_id) in submitted:
        return submitted[int(field_id)]
    return _MISSING


def _attachment_present(raw: Any) -> bool:
    if not isinstance(raw, dict) or not raw:
        return False
    inner = raw.get("value")
    if inner:
        return True
    return bool(raw.get("filePath") or raw.get("fileName"))


def _is_present(raw: Any, field_type: FieldType | None) -> bool:
    if field_type == FieldType.ATTACHMENT:
        return _attachment_present(raw)
    return raw is not _MISSING and raw is not None and raw != ""


def validate_field_value(raw: Any, field: CustomFieldDefinition) -> Any:
    """Coerce one submitted value according to the field's declared type."""
    field_type = field.field_type
    if field_type == FieldType.ATTACHMENT:
        return _validate_attachment(raw, field)
    if raw is None:
        return None
    value = _unwrap(raw)
    if field_type is None:
        return value
    return _VALIDATORS[field_type](value, field)


def validate_fields(
    submitted: Mapping[Any, Any] | None,
    schema: Iterable[Union[dict, CustomFieldDefinition]] | None,
) -> dict[str, dict]:
    """Validate *submitted* values against a cabinet's field *schema*.

    Returns ``{str(field_id): {"fieldId", "type", "value"}}``. Fields not in
    the schema are dropped; optional fields that were not submitted are
    omitted rather than stored as null.

    Raises:
        MandatoryFieldMissingError: a mandatory field has no value.
        InvalidFieldValueError: a value fails its type check.
    """
    submitted = submitted or {}
    validated: dict[str, dict] = {}

    for definition in schema or []:
        field = (
            definition if isinstance(definition, CustomFieldDefinition)
            else CustomFieldDefinition.model_validate(definition)
        )
        raw = _lookup(submitted, field.id)

        if field.is_mandatory and not _is_present(raw, field.field_type):
            raise MandatoryFieldMissingError(field.name)

        if field.field_type == FieldType.ATTACHMENT:
            if not _attachment_present(raw):
                continue
        elif raw is _MISSING:
            continue

        validated[str(field.id)] = ValidatedField(
            field_id=field.id,
            type=field.type,
            value=validate_field_value(raw, field),
        ).to_storage()

    return validated


def first_attachment(validated: Mapping[str, dict]) -> dict | None:
    """File info of the first Attachment field carrying a value, if any."""
    for entry in validated.values():
        if entry.get("type") == FieldType.ATTACHMENT.value and entry.get("value"):
            return entry["value"]
    return None


def normalize_attachment_fields(custom_fields: Mapping[str, Any] | None) -> dict:
    """Return a copy of stored custom fields with Attachment values re-shaped.

    Older rows kept file keys next to ``value`` instead of inside it; both
    layouts are coalesced into ``value``.
    """
    normalized: dict = {}
    for field_id, entry in (custom_fields or {}).items():
        if isinstance(entry, dict) and entry.get("type") == FieldType.ATTACHMENT.value and entry.get("value"):
            value = entry["value"] if isinstance(entry["value"], dict) else {}
            entry = dict(entry)
            entry["value"] = {key: value.get(key) or entry.get(key) for key in ATTACHMENT_FILE_KEYS}
        normalized[field_id] = entry
    return normalized
