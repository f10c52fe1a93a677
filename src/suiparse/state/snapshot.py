"""Object snapshots, balance extraction and version diffs."""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ..exceptions import InvalidPayload
from ..parser.models import require_dict, require_str

VERSION_FOUND = "VersionFound"
MOVE_OBJECT = "moveObject"

U64_MAX = 2 ** 64 - 1
_DIGITS = re.compile(r"[0-9]+")


@dataclass
class ObjectContent:
    data_type: str
    type_tag: Optional[str] = None
    fields: Optional[Any] = None


@dataclass
class ObjectSnapshot:
    """State of an object at one version, from sui_tryGetPastObject."""
    status: str
    content: Optional[ObjectContent] = None

    @classmethod
    def from_json(cls, raw: Any) -> "ObjectSnapshot":
        raw = require_dict(raw, "pastObject")
        status = require_str(raw, "status", "pastObject")

        # For VersionNotFound / ObjectNotExists the node puts a tuple or a
        # bare id in "details"; only an object carries content.
        details = raw.get("details")
        content = None
        if isinstance(details, dict) and details.get("content") is not None:
            content_raw = require_dict(details["content"], "details.content")
            type_tag = content_raw.get("type")
            if type_tag is not None and not isinstance(type_tag, str):
                raise InvalidPayload("details.content.type must be a string")
            content = ObjectContent(
                data_type=require_str(content_raw, "dataType", "details.content"),
                type_tag=type_tag,
                fields=content_raw.get("fields"),
            )
        return cls(status=status, content=content)

    @property
    def found(self) -> bool:
        return self.status == VERSION_FOUND

    @property
    def type_tag(self) -> Optional[str]:
        if not self.found or self.content is None:
            return None
        return self.content.type_tag

    def move_fields(self) -> Optional[Dict[str, Any]]:
        """Field map of a found Move object, None for anything else."""
        if not self.found or self.content is None:
            return None
        if self.content.data_type != MOVE_OBJECT:
            return None
        fields = self.content.fields
        return fields if isinstance(fields, dict) else None


def as_u64(value: Any) -> Optional[int]:
    """Read an unsigned 64-bit integer from a JSON number or decimal string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value <= U64_MAX else None
    if isinstance(value, str) and _DIGITS.fullmatch(value):
        number = int(value)
        return number if number <= U64_MAX else None
    return None


def balance_member(fields: Dict[str, Any]) -> Optional[int]:
    """`balance: 123`, `balance: "123"` or `balance: {value: ...}`."""
    balance = fields.get("balance")
    number = as_u64(balance)
    if number is None and isinstance(balance, dict):
        number = as_u64(balance.get("value"))
    return number


def value_member(fields: Dict[str, Any]) -> Optional[int]:
    """`value: 123` or `value: "123"`."""
    return as_u64(fields.get("value"))


def wrapped_value_member(fields: Dict[str, Any]) -> Optional[int]:
    """`value: {fields: {balance | value}}`, e.g. a Coin stored in a Field."""
    value = fields.get("value")
    if not isinstance(value, dict):
        return None
    nested = value.get("fields")
    if not isinstance(nested, dict):
        return None
    number = as_u64(nested.get("balance"))
    if number is None:
        number = as_u64(nested.get("value"))
    return number


# Order matters: some objects match several rules with different meanings.
BALANCE_RULES: Tuple[Callable[[Dict[str, Any]], Optional[int]], ...] = (
    balance_member,
    value_member,
    wrapped_value_member,
)


def extract_balance(snapshot: Optional[ObjectSnapshot]) -> Optional[int]:
    """Return the first balance any rule finds, or None."""
    if snapshot is None:
        return None
    fields = snapshot.move_fields()
    if fields is None:
        return None
    for rule in BALANCE_RULES:
        number = rule(fields)
        if number is not None:
            return number
    return None


@dataclass(frozen=True)
class BalanceDiff:
    previous: int
    current: int

    @property
    def diff(self) -> int:
        return self.current - self.previous


def calculate_diff(
    current: ObjectSnapshot,
    previous: Optional[ObjectSnapshot] = None,
) -> Optional[BalanceDiff]:
    """
    Diff the balances of two snapshots of the same object.

    Returns None when the current snapshot has no balance. A missing
    previous snapshot or balance counts as 0 (newly created object).
    """
    current_value = extract_balance(current)
    if current_value is None:
        return None
    previous_value = extract_balance(previous)
    return BalanceDiff(previous=previous_value or 0, current=current_value)
