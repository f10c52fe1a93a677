"""
Object change records and bag member selection.

A transaction's objectChanges list is tagged by its "type" member.
Only created and mutated objects carry an owner, so only they can be
members of a bag.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from ..exceptions import InvalidPayload
from ..parser.models import require_dict, require_str
from ..parser.owner import ObjectOwner, Owner, decode_owner


@dataclass(frozen=True)
class CreatedChange:
    object_id: str
    version: str
    owner: Optional[Owner] = None


@dataclass(frozen=True)
class MutatedChange:
    object_id: str
    version: str
    previous_version: str
    owner: Optional[Owner] = None


@dataclass(frozen=True)
class DeletedChange:
    object_id: str


@dataclass(frozen=True)
class OtherChange:
    """published, transferred, wrapped and any future change kinds."""
    kind: str
    raw: Any = None


ObjectChange = Union[CreatedChange, MutatedChange, DeletedChange, OtherChange]


@dataclass(frozen=True)
class BagMember:
    """An object owned by the queried bag, with the versions to compare."""
    object_id: str
    version: str
    previous_version: Optional[str] = None


def _version(raw: Dict[str, Any], key: str, context: str) -> str:
    value = raw.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return require_str(raw, key, context)


def decode_object_change(raw: Any) -> ObjectChange:
    """Decode one objectChanges entry."""
    raw = require_dict(raw, "objectChanges[]")
    kind = raw.get("type")

    if kind == "created":
        return CreatedChange(
            object_id=require_str(raw, "objectId", "created"),
            version=_version(raw, "version", "created"),
            owner=decode_owner(raw.get("owner")),
        )
    if kind == "mutated":
        return MutatedChange(
            object_id=require_str(raw, "objectId", "mutated"),
            version=_version(raw, "version", "mutated"),
            previous_version=_version(raw, "previousVersion", "mutated"),
            owner=decode_owner(raw.get("owner")),
        )
    if kind == "deleted":
        return DeletedChange(object_id=require_str(raw, "objectId", "deleted"))

    return OtherChange(kind=str(kind), raw=raw)


def decode_object_changes(raw: Any) -> List[ObjectChange]:
    """Decode the objectChanges list of a transaction; null means empty."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidPayload("objectChanges must be a list")
    return [decode_object_change(item) for item in raw]


def select_bag_members(changes: Sequence[ObjectChange], bag_id: str) -> List[BagMember]:
    """
    Select created/mutated objects whose owner is exactly `bag_id`.

    The id comparison is plain string equality; no hex case or prefix
    normalisation is applied.
    """
    members = []
    for change in changes:
        if not isinstance(change, (CreatedChange, MutatedChange)):
            continue
        owner = change.owner
        if not isinstance(owner, ObjectOwner) or owner.object_id != bag_id:
            continue

        previous = change.previous_version if isinstance(change, MutatedChange) else None
        members.append(BagMember(change.object_id, change.version, previous))
    return members
