"""Object change selection and snapshot balance diffs."""

from .object_changes import (
    BagMember,
    CreatedChange,
    DeletedChange,
    MutatedChange,
    OtherChange,
    decode_object_change,
    decode_object_changes,
    select_bag_members,
)
from .snapshot import (
    BALANCE_RULES,
    BalanceDiff,
    ObjectContent,
    ObjectSnapshot,
    calculate_diff,
    extract_balance,
)
