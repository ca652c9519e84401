"""Projects parsed model output onto GeneratedItem records.

Each record keeps its full JSON, plus a display list of its scalar fields
with human-readable labels. Nested objects and arrays (e.g. a card's Perks
list) are not independently displayable and only appear in the JSON.
"""

import re
from typing import Any

from cardgen.core.errors import MalformedResultShape
from cardgen.pydantic_models.generation import GeneratedField, GeneratedItem, JsonRecord

FIELD_LABELS: dict[str, str] = {
    "id": "ID",
    "VersionName": "Version Name",
    "ReferenceCardId": "Reference Card ID",
    "IsActive": "Is Active",
    "CardName": "Card Name",
    "CardIssuer": "Card Issuer",
    "CardNetwork": "Card Network",
    "CardDetails": "Card Details",
    "CardImage": "Card Image",
    "CardPrimaryColor": "Primary Color",
    "CardSecondaryColor": "Secondary Color",
    "effectiveFrom": "Effective From",
    "effectiveTo": "Effective To",
    "lastUpdated": "Last Updated",
    "AnnualFee": "Annual Fee",
    "ForeignExchangeFee": "Foreign Exchange Fee",
    "ForeignExchangeFeePercentage": "FX Fee Percentage",
    "RewardsCurrency": "Rewards Currency",
    "PointsPerDollar": "Points Per Dollar",
    "Title": "Title",
    "Category": "Category",
    "SubCategory": "Subcategory",
    "Description": "Description",
    "Value": "Value",
    "TimePeriod": "Time Period",
    "Requirements": "Requirements",
    "Details": "Details",
    "Name": "Name",
    "Multiplier": "Multiplier",
    "EffectiveFrom": "Effective From",
    "EffectiveTo": "Effective To",
    "LastUpdated": "Last Updated",
}

_CAPITAL_RE = re.compile(r"([A-Z])")


def label_for(key: str) -> str:
    """Display label for a record key.

    Known keys use FIELD_LABELS; anything else gets a space inserted before
    each capital letter ("AnnualFeeWaived" -> "Annual Fee Waived").
    """
    if key in FIELD_LABELS:
        return FIELD_LABELS[key]
    return _CAPITAL_RE.sub(r" \1", key).strip()


def record_to_fields(record: JsonRecord) -> tuple[GeneratedField, ...]:
    """Scalar fields of a record in key order."""
    return tuple(
        GeneratedField(key=key, label=label_for(key), value=value)
        for key, value in record.items()
        if not isinstance(value, (dict, list))
    )


def _to_item(record: Any, position: int | None = None) -> GeneratedItem:
    if not isinstance(record, dict):
        where = f" at index {position}" if position is not None else ""
        raise MalformedResultShape(
            f"Expected a JSON object{where}, got {type(record).__name__}"
        )
    return GeneratedItem(fields=record_to_fields(record), json=record)


def project(parsed: Any, batch_mode: bool) -> tuple[GeneratedItem, ...]:
    """Convert a parsed JSON value into generated items.

    Args:
        parsed: Value returned by json.loads.
        batch_mode: Whether an array of records was requested.

    Returns:
        One item per record. A batch request answered with a single object
        yields a one-item result rather than an error.

    Raises:
        MalformedResultShape: An array without batch mode, a scalar value,
            or a batch array containing non-objects.
    """
    if isinstance(parsed, list):
        if not batch_mode:
            raise MalformedResultShape(
                "Model returned a JSON array where a single object was expected"
            )
        return tuple(_to_item(record, index) for index, record in enumerate(parsed))

    if isinstance(parsed, dict):
        return (_to_item(parsed),)

    raise MalformedResultShape(
        f"Model returned a JSON {type(parsed).__name__}, expected an object or array"
    )
