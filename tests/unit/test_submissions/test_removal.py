"""Unit tests for the removal planner."""

import pytest

from src.submissions.removal import RemovalAction, plan_removal, resolve_selection


TAGS = ["bchallenge", "achallenge", "cchallenge"]


class TestResolveSelection:
    """Tests for resolving a selection."""

    def test_by_name(self) -> None:
        """Test a listed tag name resolves to itself."""
        assert resolve_selection(TAGS, "cchallenge") == "cchallenge"

    @pytest.mark.parametrize(
        ("selection", "expected"),
        [("1", "achallenge"), ("2", "bchallenge"), (" 3 ", "cchallenge")],
    )
    def test_by_index_into_sorted_list(self, selection: str, expected: str) -> None:
        """Test numbers are 1-based positions in the sorted list."""
        assert resolve_selection(TAGS, selection) == expected

    @pytest.mark.parametrize("selection", ["0", "4", "dchallenge", "", "-1"])
    def test_unknown(self, selection: str) -> None:
        """Test selections outside the list resolve to None."""
        assert resolve_selection(TAGS, selection) is None


class TestPlanRemoval:
    """Tests for plan_removal."""

    def test_remove_when_confirmed(self) -> None:
        """Test a valid confirmed selection is removed."""
        plan = plan_removal(TAGS, "2", confirmed=True)

        assert plan.action == RemovalAction.REMOVE
        assert plan.tag == "bchallenge"

    def test_cancelled_without_confirmation(self) -> None:
        """Test declining the confirmation cancels."""
        plan = plan_removal(TAGS, "achallenge", confirmed=False)

        assert plan.action == RemovalAction.CANCELLED
        assert plan.tag == "achallenge"

    def test_invalid_selection(self) -> None:
        """Test unknown selections are invalid even when confirmed."""
        plan = plan_removal(TAGS, "9", confirmed=True)

        assert plan.action == RemovalAction.INVALID_SELECTION
        assert plan.tag is None

    def test_no_tags(self) -> None:
        """Test an empty index yields NO_TAGS."""
        plan = plan_removal([], "1", confirmed=True)

        assert plan.action == RemovalAction.NO_TAGS
