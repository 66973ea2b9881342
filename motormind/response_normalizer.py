"""Tolerant parsing of oracle replies into canonical request and offer records.

Every oracle reply is untrusted text. The normalizer tries three tiers in order and
reparses the whole record in each one:

    1. direct JSON decode of the full reply,
    2. JSON decode of the greedy "{...}" span embedded in the reply,
    3. ordered regex families per field over the raw text.

Whatever the tier outcome, the result is a fully populated record: unresolved strings
become "Unknown", delivery days default to 7 and the unit id to "".
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Pattern, Tuple, Union, cast

from .utils import extract_json_block, title_words

logger = logging.getLogger("motormind.normalizer")

UNKNOWN = "Unknown"
DEFAULT_DELIVERY_DAYS = 7

FIELD_ALIASES: Dict[str, List[str]] = {
    "model": ["Model", "model", "vehicle", "bike"],
    "location": ["location", "Location", "city", "place"],
    "color": ["Color", "color", "colour"],
    "uuid": ["uuid", "id", "vehicleId", "vehicle_id"],
}
DELIVERY_DAYS_KEYS = ["deliveryDays", "delivery_days", "days", "delivery"]
ETA_KEYS = ["eta", "ETA"]

# Words that end a label-prefixed capture ("in jodhpur color blue" -> "jodhpur").
_STOP = r"(?:and|or|with|within|in|at|by|for|color|colour|model|bike|vehicle|location|delivery|eta|days?)"
_NAME = r"[a-zA-Z0-9][a-zA-Z0-9\-]*"
_WORD = r"[a-zA-Z]+"

MODEL_PATTERNS: List[Pattern[str]] = [
    re.compile(rf"\b(?:model|bike|vehicle)\b[\s:=\"']*({_NAME}(?:[ \t]+(?!{_STOP}\b){_NAME})*)", re.IGNORECASE),
    re.compile(
        r"\b(supersplendor|splendor|pulsar|apache|ktm|royal enfield|honda|yamaha|bajaj)\b",
        re.IGNORECASE,
    ),
]
LOCATION_PATTERNS: List[Pattern[str]] = [
    re.compile(rf"\b(?:in|at|location)\b[\s:=\"']*({_WORD}(?:[ \t]+(?!{_STOP}\b){_WORD})*)", re.IGNORECASE),
    re.compile(
        r"\b(delhi|mumbai|bangalore|chennai|kolkata|hyderabad|pune|ahmedabad|jaipur|jodhpur|udaipur|kota|bikaner)\b",
        re.IGNORECASE,
    ),
]
COLOR_PATTERNS: List[Pattern[str]] = [
    re.compile(rf"\b(?:color|colour)\b[\s:=\"']*({_WORD}(?:[ \t]+(?!{_STOP}\b){_WORD})*)", re.IGNORECASE),
    re.compile(
        r"\b(red|blue|green|yellow|black|white|silver|grey|gray|orange|purple|pink)\b",
        re.IGNORECASE,
    ),
]
DELIVERY_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\b(?:within|in|delivery)[\s:]*(\d{1,6})\s*days?\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,6})\s*days?\s*(?:delivery|time)\b", re.IGNORECASE),
    re.compile(r"\b(?:eta|delivery)[\s:]*(\d{1,6})\s*days?\b", re.IGNORECASE),
    re.compile(r"\"eta\"\s*:\s*\"(\d{1,6})\s*day", re.IGNORECASE),
]
UUID_PATTERN = re.compile(r"\b(?:uuid|id)\b[\s:=\"']*([0-9a-zA-Z][0-9a-zA-Z_\-]{3,})", re.IGNORECASE)
ETA_NUMBER_RE = re.compile(r"(?<!\d)(\d{1,6})(?!\d)")
NUMERIC_RE = re.compile(r"\d{1,6}(?:\.\d+)?")


@dataclass(frozen=True)
class CustomerRequest:
    """Canonical customer intent; absent values are sentinels, never missing."""
    model: str = UNKNOWN
    location: str = UNKNOWN
    color: str = UNKNOWN
    delivery_days: int = DEFAULT_DELIVERY_DAYS

    @property
    def is_unrecognized(self) -> bool:
        return (
            self.model == UNKNOWN
            and self.location == UNKNOWN
            and self.color == UNKNOWN
            and self.delivery_days == DEFAULT_DELIVERY_DAYS
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["deliveryDays"] = data.pop("delivery_days")
        return data


@dataclass(frozen=True)
class AllocationOffer(CustomerRequest):
    """Oracle-proposed unit for a request; uuid is "" when none was given."""
    uuid: str = ""


def normalize(raw_text: Optional[str], as_offer: bool = False) -> Union[CustomerRequest, AllocationOffer]:
    """Purpose: Convert raw oracle text into a canonical request or offer record.
    Inputs/Outputs: Input is untrusted text and the record kind; output is a fully
        populated CustomerRequest, or AllocationOffer when as_offer is True.
    Side Effects / State: Debug logging of the tier that produced the record.
    Dependencies: Uses _parse_tiers and _finalize.
    Failure Modes: None; malformed input degrades to sentinel defaults.
    If Removed: Every oracle reply would need ad-hoc parsing in the orchestrator.
    Testing Notes: Cover direct JSON, embedded JSON, heuristic text, and garbage.
    """
    # Parse through the tiers, then guarantee types and defaults.
    fields, tier = _parse_tiers(raw_text or "", as_offer)
    logger.debug("tier=%s fields=%s", tier, json.dumps(fields, ensure_ascii=True, default=str))
    return _finalize(fields, as_offer)


def normalize_request(raw_text: Optional[str]) -> CustomerRequest:
    return normalize(raw_text, as_offer=False)


def normalize_offer(raw_text: Optional[str]) -> AllocationOffer:
    return cast(AllocationOffer, normalize(raw_text, as_offer=True))


def _parse_tiers(raw_text: str, as_offer: bool) -> Tuple[Dict[str, Any], str]:
    # Tier 1: the whole reply is a JSON document.
    try:
        direct = json.loads(raw_text)
    except (json.JSONDecodeError, ValueError):
        direct = None
    if isinstance(direct, dict):
        return _extract_fields(direct), "direct"

    # Tier 2: a JSON object is embedded in surrounding prose.
    block = extract_json_block(raw_text)
    if block:
        try:
            embedded = json.loads(block)
        except (json.JSONDecodeError, ValueError):
            embedded = None
        if isinstance(embedded, dict):
            return _extract_fields(embedded), "embedded"
        logger.debug("embedded JSON decode failed, falling back to heuristics")

    # Tier 3: regex families over the raw text.
    return _extract_heuristic(raw_text, as_offer), "heuristic"


def _extract_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        name: _first_alias_value(data, aliases) for name, aliases in FIELD_ALIASES.items()
    }
    fields["delivery_days"] = _extract_delivery_days(data)
    return fields


def _first_alias_value(data: Dict[str, Any], keys: List[str]) -> Optional[str]:
    """Purpose: Return the first alias key holding a non-empty string or number.
    Inputs/Outputs: Input is a decoded object and ordered alias keys; output is a
        stripped string or None.
    Side Effects / State: None.
    Dependencies: Consumes FIELD_ALIASES entries.
    Failure Modes: Returns None when no alias carries a usable value.
    If Removed: Alias resolution for model/location/color/uuid fails.
    Testing Notes: Verify "Model" wins over "bike" and blank strings are skipped.
    """
    for key in keys:
        value = data.get(key)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, str):
            if value.strip():
                return value.strip()
            continue
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float) and math.isfinite(value):
            return str(int(value)) if value.is_integer() else str(value)
    return None


def _extract_delivery_days(data: Dict[str, Any]) -> Optional[int]:
    # Numeric alias fields first, then a free-text eta such as "2 days".
    for key in DELIVERY_DAYS_KEYS:
        days = _coerce_days(data.get(key))
        if days is not None:
            return days
    for key in ETA_KEYS:
        eta = data.get(key)
        if isinstance(eta, str):
            match = ETA_NUMBER_RE.search(eta)
            days = _to_days(match.group(1)) if match else None
        else:
            days = _coerce_days(eta)
        if days is not None:
            return days
    return None


def _coerce_days(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return _to_days(value) if math.isfinite(value) else None
    if isinstance(value, str) and NUMERIC_RE.fullmatch(value.strip()):
        number = float(value.strip())
        return _to_days(number) if math.isfinite(number) else None
    return None


def _to_days(value: Union[str, float]) -> Optional[int]:
    # Oversized or non-numeric captures leave the field unresolved (default 7).
    try:
        days = int(value)
    except (ValueError, OverflowError):
        return None
    return days if days >= 0 else None


def _extract_heuristic(raw_text: str, as_offer: bool) -> Dict[str, Any]:
    fields: Dict[str, Any] = {
        "model": _first_pattern_match(raw_text, MODEL_PATTERNS),
        "location": _first_pattern_match(raw_text, LOCATION_PATTERNS),
        "color": _first_pattern_match(raw_text, COLOR_PATTERNS),
        "delivery_days": None,
        "uuid": None,
    }
    for pattern in DELIVERY_PATTERNS:
        match = pattern.search(raw_text)
        if match:
            fields["delivery_days"] = _to_days(match.group(1))
            break
    if as_offer:
        match = UUID_PATTERN.search(raw_text)
        if match:
            fields["uuid"] = match.group(1)
    return fields


def _first_pattern_match(text: str, patterns: List[Pattern[str]]) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if not match:
            continue
        value = (match.group(1) or "").strip()
        if value:
            return value
    return None


def _finalize(fields: Dict[str, Any], as_offer: bool) -> Union[CustomerRequest, AllocationOffer]:
    # Post-validation: strings are never empty/None and delivery days is an int.
    def text(name: str) -> str:
        value = fields.get(name)
        if not isinstance(value, str) or not value.strip():
            return UNKNOWN
        if value.strip().lower() == UNKNOWN.lower():
            return UNKNOWN
        return title_words(value.strip())

    days = fields.get("delivery_days")
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        days = DEFAULT_DELIVERY_DAYS

    if as_offer:
        uuid = fields.get("uuid")
        return AllocationOffer(
            model=text("model"),
            location=text("location"),
            color=text("color"),
            delivery_days=days,
            uuid=uuid.strip() if isinstance(uuid, str) else "",
        )
    return CustomerRequest(
        model=text("model"),
        location=text("location"),
        color=text("color"),
        delivery_days=days,
    )
