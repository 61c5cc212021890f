import pytest

from auditdesk.domain.pagination import ELLIPSIS
from auditdesk.tests.unit.viewmodels.helpers import kinds, make_list_vm
from auditdesk.viewmodels.list_settings import ListSettings
from auditdesk.viewmodels.list_vm import ChangeKind


def test_initial_state_uses_settings_page_size():
    vm, _, events = make_list_vm(settings=ListSettings(page_size=50))

    assert vm.state.page_size == 50
    assert vm.current_page == 1
    assert vm.pagination is None
    assert events == []


def test_out_of_range_pages_are_ignored():
    vm, _, events = make_list_vm()
    vm.data_loaded(80)  # 4 pages of 20
    events.clear()

    assert vm.set_page(0) is False
    assert vm.set_page(4 + 5) is False
    assert vm.set_page(-3) is False
    assert vm.current_page == 1
    assert events == []


@pytest.mark.parametrize("page", [0, -1, 5, 9, 100])
def test_set_page_outside_range_keeps_current_page(page):
    vm, _, _ = make_list_vm()
    vm.data_loaded(80)
    vm.set_page(3)

    vm.set_page(page)

    assert vm.current_page == 3


def test_set_page_moves_and_notifies():
    vm, _, events = make_list_vm()
    vm.data_loaded(80)
    events.clear()

    assert vm.set_page(3) is True

    assert vm.current_page == 3
    assert kinds(events) == [ChangeKind.PAGE]
    assert vm.pagination.has_prev_page and vm.pagination.has_next_page
    assert vm.set_page(3) is False


def test_set_page_before_first_load_accepts_any_positive_page():
    vm, _, _ = make_list_vm()

    assert vm.set_page(7) is True
    assert vm.set_page(0) is False
    assert vm.current_page == 7


def test_page_requests_dropped_while_loading():
    vm, _, events = make_list_vm()
    vm.data_loaded(80)
    vm.loading_started()
    events.clear()

    assert vm.set_page(2) is False
    assert vm.next_page() is False
    assert vm.current_page == 1
    assert events == []

    vm.loading_finished()
    assert vm.next_page() is True
    assert vm.current_page == 2


def test_loading_flags_notify_only_on_change():
    vm, _, events = make_list_vm()

    vm.loading_started()
    vm.loading_started()
    vm.loading_finished()

    assert kinds(events) == [ChangeKind.LOADING, ChangeKind.LOADING]
    assert vm.is_loading is False


def test_next_and_prev_stop_at_bounds():
    vm, _, _ = make_list_vm()
    vm.data_loaded(40)

    assert vm.prev_page() is False
    assert vm.next_page() is True
    assert vm.next_page() is False
    assert vm.current_page == 2
    assert vm.prev_page() is True
    assert vm.current_page == 1


def test_recompute_clamps_page_and_signals_page_change():
    vm, _, events = make_list_vm()
    vm.data_loaded(200)
    vm.set_page(9)
    events.clear()

    result = vm.recompute_pagination(50)

    assert vm.current_page == 3
    assert result.total_pages == 3
    assert result.has_next_page is False
    assert kinds(events) == [ChangeKind.PAGINATION, ChangeKind.PAGE]


def test_recompute_with_empty_result_keeps_page_one():
    vm, _, events = make_list_vm()
    vm.data_loaded(100)
    vm.set_page(5)
    events.clear()

    result = vm.data_loaded(0)

    assert vm.current_page == 1
    assert result.total_pages == 0
    assert result.has_next_page is False
    assert result.has_prev_page is False
    assert vm.pager_snapshot().pages_to_show == ()


def test_recompute_accepts_new_page_size():
    vm, _, _ = make_list_vm()
    vm.data_loaded(100)

    result = vm.recompute_pagination(100, page_size=50)

    assert vm.state.page_size == 50
    assert result.total_pages == 2


def test_set_page_size_resets_to_first_page():
    vm, _, events = make_list_vm()
    vm.data_loaded(100)
    vm.set_page(4)
    events.clear()

    result = vm.set_page_size(50)

    assert result.ok
    assert vm.current_page == 1
    assert vm.total_pages == 2
    assert kinds(events) == [ChangeKind.PAGE_SIZE]


@pytest.mark.parametrize("page_size", [0, 101, -5])
def test_set_page_size_rejects_out_of_range(page_size):
    vm, _, events = make_list_vm()

    result = vm.set_page_size(page_size)

    assert not result.ok
    assert vm.state.page_size == 20
    assert events == []


def test_pager_snapshot_renders_window_and_neighbours():
    vm, _, _ = make_list_vm()
    vm.data_loaded(200)
    vm.set_page(5)

    pager = vm.pager_snapshot()

    assert pager.pages_to_show == (1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10)
    assert pager.can_go_next and pager.can_go_prev
    assert pager.total_pages == 10

    vm.loading_started()
    pager = vm.pager_snapshot()
    assert pager.is_loading
    assert not pager.can_go_next and not pager.can_go_prev


def test_pager_snapshot_honours_max_pages_setting():
    vm, _, _ = make_list_vm(settings=ListSettings(max_pages_to_show=5))
    vm.data_loaded(200)

    assert vm.pager_snapshot().pages_to_show == (1, 2, 3, 4, 5, ELLIPSIS, 10)


def test_query_snapshot_reflects_settled_state():
    vm, _, _ = make_list_vm("reports")
    vm.data_loaded(100)
    vm.set_page(3)
    vm.set_query("weekly")

    snapshot = vm.query_snapshot()

    assert snapshot.search_query == ""
    assert snapshot.current_page == 3
    assert snapshot.offset == 40
    assert (snapshot.sort_by, snapshot.sort_direction) == ("createdAt", "desc")
    assert snapshot.filters == {}


def test_closed_view_model_ignores_late_fetch_results():
    vm, _, _ = make_list_vm()
    vm.data_loaded(200)
    vm.set_page(8)
    before = vm.pagination
    vm.close()

    assert vm.data_loaded(20, ["a"]) is before
    assert vm.recompute_pagination(0, page_size=50) is before
    assert vm.current_page == 8
    assert vm.state.page_size == 20
    assert vm.total_pages == 10
