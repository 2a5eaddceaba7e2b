# tests/web_admin/test_selection.py
"""
Тесты состояния выбора поездки.
"""

from __future__ import annotations

from ops_console.web_admin.monitoring.selection import SelectionState


class TestSelectionState:
    """Тесты для SelectionState."""

    def test_initially_empty(self) -> None:
        selection = SelectionState()
        assert selection.is_empty
        assert selection.selected_id is None

    def test_select_and_toggle(self) -> None:
        """Повторный выбор той же поездки снимает выбор."""
        selection = SelectionState()

        assert selection.select("r1") == "r1"
        assert selection.is_selected("r1")
        assert selection.select("r1") is None
        assert selection.is_empty

    def test_toggle_after_switch(self) -> None:
        selection = SelectionState()
        selection.select("r1")

        selection.select("r2")
        selection.select("r2")

        assert selection.is_empty

    def test_select_other_replaces(self) -> None:
        selection = SelectionState()
        selection.select("r1")
        selection.select("r2")
        assert selection.selected_id == "r2"
        assert not selection.is_selected("r1")

    def test_reconcile_drops_vanished(self) -> None:
        selection = SelectionState()
        selection.select("r1")

        assert selection.reconcile(["r2", "r3"]) is True
        assert selection.is_empty

    def test_reconcile_keeps_present(self) -> None:
        selection = SelectionState()
        selection.select("r1")

        assert selection.reconcile(iter(["r1", "r2"])) is False
        assert selection.selected_id == "r1"

    def test_reconcile_when_empty(self) -> None:
        assert SelectionState().reconcile([]) is False
