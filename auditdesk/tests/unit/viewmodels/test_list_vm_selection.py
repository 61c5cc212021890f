from auditdesk.tests.unit.viewmodels.helpers import kinds, make_list_vm
from auditdesk.viewmodels.list_settings import ListSettings
from auditdesk.viewmodels.list_vm import ChangeKind


def test_selection_mode_follows_selection():
    vm, _, events = make_list_vm()

    assert vm.toggle_selection("dev-1") is True
    assert vm.selected_ids == frozenset({"dev-1"})
    assert vm.is_selection_mode

    vm.toggle_selection("dev-1")
    assert vm.selected_ids == frozenset()
    assert not vm.is_selection_mode
    assert kinds(events) == [ChangeKind.SELECTION, ChangeKind.SELECTION]


def test_explicit_selection_mode_with_empty_selection():
    vm, _, _ = make_list_vm()

    vm.enter_selection_mode()
    assert vm.is_selection_mode
    assert vm.selected_ids == frozenset()

    vm.toggle_selection("dev-1")
    vm.toggle_selection("dev-1")
    assert not vm.is_selection_mode

    vm.enter_selection_mode()
    vm.exit_selection_mode()
    assert not vm.is_selection_mode


def test_only_loaded_rows_can_be_selected():
    vm, _, _ = make_list_vm()
    vm.data_loaded(3, ["a", "b", "c"])

    assert vm.toggle_selection("z") is False
    vm.select_all(["a", "b", "z"])

    assert vm.selected_ids == frozenset({"a", "b"})


def test_reload_prunes_rows_that_disappeared():
    vm, _, events = make_list_vm()
    vm.data_loaded(3, ["a", "b", "c"])
    vm.select_all(["a", "b"])
    events.clear()

    vm.data_loaded(2, ["a", "c"])

    assert vm.selected_ids == frozenset({"a"})
    assert kinds(events) == [ChangeKind.SELECTION, ChangeKind.PAGINATION]


def test_page_change_clears_selection():
    vm, _, _ = make_list_vm()
    vm.data_loaded(60, ["a", "b"])
    vm.toggle_selection("a")

    vm.set_page(2)

    assert vm.selected_ids == frozenset()
    assert not vm.is_selection_mode
    # rows of page 2 are not known yet
    assert vm.toggle_selection("x") is True


def test_selection_persists_across_pages_when_enabled():
    vm, _, _ = make_list_vm(settings=ListSettings(persist_selection_across_pages=True))
    vm.data_loaded(60, ["a", "b"])
    vm.toggle_selection("a")

    vm.set_page(2)
    vm.data_loaded(60, ["c", "d"])
    vm.select_all(["c"])

    assert vm.selected_ids == frozenset({"a", "c"})
    assert vm.is_selection_mode


def test_query_reset_clears_selection_only_when_page_moves():
    vm, clock, _ = make_list_vm()
    vm.data_loaded(60)
    vm.toggle_selection("a")

    vm.set_query("x")
    clock.advance(300)
    assert vm.selected_ids == frozenset({"a"})

    vm.set_page(2)
    vm.toggle_selection("b")
    vm.set_filter("vendor", "acme")
    assert vm.selected_ids == frozenset()


def test_clear_selection():
    vm, _, _ = make_list_vm()
    vm.select_all(["a", "b"])

    vm.clear_selection()

    assert vm.selected_ids == frozenset()
    assert not vm.is_selection_mode
