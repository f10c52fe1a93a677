"""
Object owner model and resolver.

The node reports ownership as an untagged union: a bare string for
immutable objects, or a single-key object whose key names the owner
kind. Unknown shapes are kept as OpaqueOwner so newer node versions
never break parsing.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class ImmutableOwner:
    value: str = "Immutable"


@dataclass(frozen=True)
class AddressOwner:
    address: str


@dataclass(frozen=True)
class ObjectOwner:
    object_id: str


@dataclass(frozen=True)
class SharedOwner:
    initial_shared_version: str
    mutable: Optional[bool] = None


@dataclass(frozen=True)
class ConsensusV2Owner:
    start_version: str


@dataclass(frozen=True)
class OpaqueOwner:
    raw: Any


Owner = Union[
    ImmutableOwner,
    AddressOwner,
    ObjectOwner,
    SharedOwner,
    ConsensusV2Owner,
    OpaqueOwner,
]


def _version_str(value: Any) -> Optional[str]:
    # Versions arrive as strings from the JSON-RPC API, but some
    # indexers re-encode them as numbers.
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return str(value)
    return None


def decode_owner(raw: Any) -> Optional[Owner]:
    """
    Decode a raw owner value into an Owner variant.

    Args:
        raw: The `owner` member of a balance or object change

    Returns:
        None for a missing owner, otherwise one of the Owner variants.
        Never raises.
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        return ImmutableOwner(raw)

    if isinstance(raw, dict):
        address = raw.get("AddressOwner")
        if isinstance(address, str):
            return AddressOwner(address)

        parent = raw.get("ObjectOwner")
        if isinstance(parent, str):
            return ObjectOwner(parent)

        shared = raw.get("Shared")
        if isinstance(shared, dict):
            version = _version_str(shared.get("initial_shared_version"))
            if version is not None:
                mutable = shared.get("mutable")
                return SharedOwner(version, mutable if isinstance(mutable, bool) else None)

        consensus = raw.get("ConsensusV2")
        if isinstance(consensus, dict):
            version = _version_str(consensus.get("start_version"))
            if version is not None:
                return ConsensusV2Owner(version)

    return OpaqueOwner(raw)


def resolve_owner(owner: Optional[Owner]) -> Optional[str]:
    """Collapse an owner into its display string."""
    if owner is None:
        return None

    if isinstance(owner, ImmutableOwner):
        return owner.value
    if isinstance(owner, AddressOwner):
        return owner.address
    if isinstance(owner, ObjectOwner):
        return owner.object_id
    if isinstance(owner, SharedOwner):
        return f"Shared-{owner.initial_shared_version}"
    if isinstance(owner, ConsensusV2Owner):
        return f"ConsensusV2-{owner.start_version}"

    raw = owner.raw
    try:
        return json.dumps(raw, separators=(",", ":"))
    except (TypeError, ValueError):
        return str(raw)
