from auditdesk.tests.unit.viewmodels.helpers import kinds, make_list_vm
from auditdesk.viewmodels.list_settings import ListSettings
from auditdesk.viewmodels.list_vm import ChangeKind


def test_query_input_is_shown_immediately_and_applied_after_quiet_period():
    vm, clock, events = make_list_vm()

    vm.set_query("core")

    assert vm.search_input == "core"
    assert vm.state.search_query == ""
    assert vm.query_pending
    assert kinds(events) == [ChangeKind.QUERY_INPUT]

    clock.advance(300)

    assert vm.state.search_query == "core"
    assert not vm.query_pending
    assert kinds(events)[-1] == ChangeKind.QUERY


def test_settled_query_resets_page_from_any_page():
    for start_page in (1, 2, 5, 10):
        vm, clock, events = make_list_vm()
        vm.data_loaded(200)
        vm.set_page(start_page)
        events.clear()

        vm.set_query("edge")
        clock.advance(300)

        assert vm.current_page == 1
        expected = [ChangeKind.QUERY_INPUT, ChangeKind.QUERY]
        if start_page != 1:
            expected.append(ChangeKind.PAGE)
        assert kinds(events) == expected


def test_typing_burst_applies_only_last_value():
    vm, clock, events = make_list_vm()
    settled = []
    vm.subscribe(lambda event: event.kind is ChangeKind.QUERY and settled.append(event.state.search_query))

    for at_ms, text in [(0, "r"), (50, "ro"), (120, "rou"), (400, "rout")]:
        clock.advance_to(at_ms)
        vm.set_query(text)
    clock.advance_to(2000)

    assert settled == ["rout"]


def test_unsettled_typing_does_not_touch_page():
    vm, clock, _ = make_list_vm()
    vm.data_loaded(200)
    vm.set_page(6)

    vm.set_query("wan")
    clock.advance(299)

    assert vm.current_page == 6


def test_typing_back_to_applied_query_changes_nothing():
    vm, clock, events = make_list_vm()
    vm.set_query("abc")
    clock.advance(300)
    vm.data_loaded(200)
    vm.set_page(3)
    events.clear()

    vm.set_query("abcd")
    vm.set_query("abc")
    clock.advance(300)

    assert vm.current_page == 3
    assert ChangeKind.QUERY not in kinds(events)


def test_flush_query_applies_pending_input():
    vm, clock, _ = make_list_vm()

    vm.set_query("ssh")
    assert vm.flush_query() is True

    assert vm.state.search_query == "ssh"
    assert vm.flush_query() is False


def test_zero_debounce_applies_synchronously():
    vm, _, _ = make_list_vm(settings=ListSettings(debounce_ms=0))

    vm.set_query("now")

    assert vm.state.search_query == "now"


def test_none_query_clears():
    vm, clock, _ = make_list_vm()
    vm.set_query("abc")
    clock.advance(300)

    vm.set_query(None)
    clock.advance(300)

    assert vm.search_input == ""
    assert vm.state.search_query == ""


def test_close_discards_pending_query():
    vm, clock, events = make_list_vm()
    vm.set_query("abc")

    vm.close()
    clock.advance(1000)
    vm.set_query("later")

    assert vm.state.search_query == ""
    assert vm.is_closed
    assert clock.pending() == 0
    assert kinds(events) == [ChangeKind.QUERY_INPUT]
