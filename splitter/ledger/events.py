"""Typed ledger notifications appended by successful state-changing operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

EVENT_CREATED: Final[str] = "Created"
EVENT_PAYER_CHANGED: Final[str] = "PayerChanged"
EVENT_SPLITTED: Final[str] = "Splitted"
EVENT_WITHDRAW: Final[str] = "Withdraw"
EVENT_CLOSED: Final[str] = "Closed"

LEDGER_EVENT_FIELDS: Final[dict[str, tuple[str, ...]]] = {
    EVENT_CREATED: ("owner", "payer", "first_beneficiary", "second_beneficiary"),
    EVENT_PAYER_CHANGED: ("new_payer",),
    EVENT_SPLITTED: ("first_beneficiary", "second_beneficiary", "half"),
    EVENT_WITHDRAW: ("caller", "amount"),
    EVENT_CLOSED: ("caller",),
}

# Fields observers can filter on without decoding the full payload.
LEDGER_EVENT_INDEXED_FIELDS: Final[dict[str, tuple[str, ...]]] = {
    EVENT_CREATED: ("owner",),
    EVENT_PAYER_CHANGED: ("new_payer",),
    EVENT_SPLITTED: ("first_beneficiary", "second_beneficiary", "half"),
    EVENT_WITHDRAW: ("caller", "amount"),
    EVENT_CLOSED: ("caller",),
}


@dataclass(frozen=True)
class LedgerEvent:
    """One append-only ledger notification.

    Attributes:
        sequence: Position in the ledger event sequence, starting at 1.
        event_name: Notification name (`Created`, `PayerChanged`, `Splitted`, `Withdraw`, `Closed`).
        fields: Notification fields keyed by name.
        recorded_at_utc: Emission timestamp in UTC ISO-8601 format.
    """

    sequence: int
    event_name: str
    fields: dict[str, Any]
    recorded_at_utc: str

    @property
    def indexed_fields(self) -> tuple[str, ...]:
        """Return the names of the indexed fields for this notification."""

        return LEDGER_EVENT_INDEXED_FIELDS.get(self.event_name, ())

    def event_matches(self, **filters: Any) -> bool:
        """Return whether every filter equals the matching indexed field.

        Args:
            **filters: Indexed field names mapped to expected values.

        Returns:
            bool: True when all filters match.

        Raises:
            KeyError: Raised when a filter names a non-indexed field.
        """

        for field_name, expected_value in filters.items():
            if field_name not in self.indexed_fields:
                raise KeyError(f"field {field_name} is not indexed for {self.event_name}")
            if self.fields.get(field_name) != expected_value:
                return False
        return True


def ledger_build_event(
    sequence: int,
    event_name: str,
    recorded_at_utc: str,
    **fields: Any,
) -> LedgerEvent:
    """Build one notification and validate its field set.

    Args:
        sequence: Event sequence number.
        event_name: Known notification name.
        recorded_at_utc: Emission timestamp in UTC ISO-8601 format.
        **fields: Notification fields.

    Returns:
        LedgerEvent: Validated notification.

    Raises:
        ValueError: Raised when the name is unknown or fields do not match its contract.
    """

    expected_fields = LEDGER_EVENT_FIELDS.get(event_name)
    if expected_fields is None:
        raise ValueError(f"unsupported event_name={event_name}")
    if set(fields) != set(expected_fields):
        raise ValueError(
            f"event {event_name} requires fields {sorted(expected_fields)}, got {sorted(fields)}"
        )
    if sequence < 1:
        raise ValueError("sequence must be positive")

    return LedgerEvent(
        sequence=sequence,
        event_name=event_name,
        fields={field_name: fields[field_name] for field_name in expected_fields},
        recorded_at_utc=recorded_at_utc,
    )


def ledger_serialize_event(event: LedgerEvent) -> dict[str, object]:
    """Serialize one notification to a JSON-compatible payload.

    Integer amounts are rendered as decimal strings so large values stay exact
    for JSON consumers.

    Args:
        event: Ledger notification.

    Returns:
        dict[str, object]: JSON-serializable event payload.
    """

    return {
        "sequence": event.sequence,
        "event_name": event.event_name,
        "fields": {
            field_name: str(field_value) if isinstance(field_value, int) else field_value
            for field_name, field_value in event.fields.items()
        },
        "indexed_fields": list(event.indexed_fields),
        "recorded_at_utc": event.recorded_at_utc,
    }


def ledger_deserialize_event_fields(raw_fields: dict[str, Any]) -> dict[str, Any]:
    """Restore typed field values from a serialized payload.

    Args:
        raw_fields: Serialized field mapping.

    Returns:
        dict[str, Any]: Field mapping with integer amounts restored.

    Raises:
        ValueError: Raised when an amount field is not an integer string.
    """

    restored_fields: dict[str, Any] = {}
    for field_name, field_value in raw_fields.items():
        if field_name in {"half", "amount"}:
            restored_fields[field_name] = int(field_value)
        else:
            restored_fields[field_name] = field_value
    return restored_fields
