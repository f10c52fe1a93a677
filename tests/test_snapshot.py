import pytest

from suiparse.exceptions import InvalidPayload
from suiparse.state.snapshot import (
    ObjectSnapshot,
    U64_MAX,
    calculate_diff,
    extract_balance,
)

from conftest import move_object

SUI_FIELD = "0x2::dynamic_field::Field<0x1::type_name::TypeName, 0x2::balance::Balance<0x2::sui::SUI>>"


def snapshot(fields, **kwargs) -> ObjectSnapshot:
    return ObjectSnapshot.from_json(move_object(SUI_FIELD, fields, **kwargs))


class TestObjectSnapshot:

    def test_found_move_object(self):
        snap = snapshot({"balance": "10"})

        assert snap.found
        assert snap.type_tag == SUI_FIELD
        assert snap.move_fields() == {"balance": "10"}

    def test_version_not_found_has_no_content(self):
        snap = ObjectSnapshot.from_json({"status": "VersionNotFound", "details": ["0x1", 7]})

        assert not snap.found
        assert snap.content is None
        assert extract_balance(snap) is None

    def test_package_content_has_no_fields(self):
        raw = {"status": "VersionFound", "details": {"content": {"dataType": "package", "disassembled": {}}}}

        assert extract_balance(ObjectSnapshot.from_json(raw)) is None

    def test_status_other_than_version_found_is_ignored(self):
        snap = snapshot({"balance": "10"}, status="VersionTooHigh")

        assert snap.type_tag is None
        assert extract_balance(snap) is None

    @pytest.mark.parametrize("raw", [
        {"details": {}},
        {"status": "VersionFound", "details": {"content": {"type": "0x2::coin::Coin<T>"}}},
        {"status": "VersionFound", "details": {"content": {"dataType": "moveObject", "type": 3}}},
        None,
    ])
    def test_malformed(self, raw):
        with pytest.raises(InvalidPayload):
            ObjectSnapshot.from_json(raw)


class TestExtractBalance:

    @pytest.mark.parametrize("fields,expected", [
        ({"balance": 1000}, 1000),
        ({"balance": "1000"}, 1000),
        ({"balance": {"value": "1000"}}, 1000),
        ({"balance": {"value": 1000}}, 1000),
        ({"value": 42}, 42),
        ({"value": "42"}, 42),
        ({"value": {"fields": {"balance": "7"}}}, 7),
        ({"value": {"fields": {"value": 8}}}, 8),
        ({"value": {"type": "0x2::coin::Coin<T>", "fields": {"id": {"id": "0x1"}, "balance": "9"}}}, 9),
    ])
    def test_supported_layouts(self, fields, expected):
        assert extract_balance(snapshot(fields)) == expected

    def test_top_level_balance_wins_over_wrapped_value(self):
        fields = {"balance": 1000, "value": {"fields": {"balance": "5"}}}

        assert extract_balance(snapshot(fields)) == 1000

    def test_wrapped_balance_wins_over_wrapped_value(self):
        fields = {"value": {"fields": {"balance": "5", "value": "6"}}}

        assert extract_balance(snapshot(fields)) == 5

    def test_unusable_balance_falls_through_to_value(self):
        fields = {"balance": "not a number", "value": "12"}

        assert extract_balance(snapshot(fields)) == 12

    @pytest.mark.parametrize("fields", [
        {"name": "pool", "id": {"id": "0x1"}},
        {"balance": True},
        {"balance": -5},
        {"balance": "-5"},
        {"balance": 1.5},
        {"balance": str(U64_MAX + 1)},
        {"value": {"fields": {"value": {"fields": {"balance": "1"}}}}},
    ])
    def test_no_balance(self, fields):
        assert extract_balance(snapshot(fields)) is None

    def test_u64_max_is_accepted(self):
        assert extract_balance(snapshot({"balance": str(U64_MAX)})) == U64_MAX


class TestCalculateDiff:

    def test_mutated(self):
        diff = calculate_diff(snapshot({"balance": "1000"}), snapshot({"balance": "250"}))

        assert (diff.previous, diff.current, diff.diff) == (250, 1000, 750)

    def test_created_defaults_previous_to_zero(self):
        diff = calculate_diff(snapshot({"balance": "100"}))

        assert (diff.previous, diff.diff) == (0, 100)

    def test_previous_without_balance_counts_as_zero(self):
        missing = ObjectSnapshot.from_json({"status": "VersionNotFound"})

        assert calculate_diff(snapshot({"value": 3}), missing).diff == 3

    def test_decrease_is_negative(self):
        diff = calculate_diff(snapshot({"balance": "0"}), snapshot({"balance": str(U64_MAX)}))

        assert diff.diff == -U64_MAX

    def test_no_current_balance(self):
        assert calculate_diff(snapshot({"name": "x"}), snapshot({"balance": "1"})) is None
