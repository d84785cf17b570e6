"""Tests for batched list mutations."""
from unittest.mock import call

import pytest

from proxystate import create_tracking_proxy, is_discarded, is_tracked


@pytest.fixture
def rows_raw():
    return {"foo": [{"x": 1}, {"x": 2}]}


@pytest.fixture
def rows(rows_raw, listener):
    tracking = create_tracking_proxy(rows_raw)
    tracking.add_listener(listener)
    return tracking


class TestArrayMutation:
    """Each in-place list call surfaces as exactly one arrayMutation event."""

    def test_shift_push_and_detached_element(self, rows, listener):
        data = rows.proxy

        shifted = data["foo"].pop(0)
        assert listener.call_args_list == [call("arrayMutation", ["foo"], ["pop", 0])]
        assert not is_tracked(shifted)

        listener.reset_mock()
        data["foo"].append({"x": 3})
        assert listener.call_args_list == [call("arrayMutation", ["foo"], ["append", {"x": 3}])]

        listener.reset_mock()
        data["foo"][0]["y"] = 9
        assert listener.call_args_list == [call("set", ["foo", "0", "y"], 9)]

        listener.reset_mock()
        shifted["x"] = 9999
        listener.assert_not_called()

        assert data == {"foo": [{"x": 2, "y": 9}, {"x": 3}]}

    @pytest.mark.parametrize("invoke, expected_payload, expected_list", [
        (lambda items: items.append(4), ["append", 4], [3, 1, 2, 4]),
        (lambda items: items.extend((4, 5)), ["extend", [4, 5]], [3, 1, 2, 4, 5]),
        (lambda items: items.insert(0, 0), ["insert", 0, 0], [0, 3, 1, 2]),
        (lambda items: items.pop(), ["pop"], [3, 1]),
        (lambda items: items.remove(1), ["remove", 1], [3, 2]),
        (lambda items: items.clear(), ["clear"], []),
        (lambda items: items.sort(), ["sort"], [1, 2, 3]),
        (lambda items: items.sort(reverse=True), ["sort", {"reverse": True}], [3, 2, 1]),
        (lambda items: items.reverse(), ["reverse"], [2, 1, 3]),
        (lambda items: items.__setitem__(slice(0, 2), [9, 8, 7]),
         ["__setitem__", slice(0, 2), [9, 8, 7]], [9, 8, 7, 2]),
        (lambda items: items.__delitem__(slice(None, None, 2)),
         ["__delitem__", slice(None, None, 2)], [1]),
    ])
    def test_single_event_per_call(self, listener, invoke, expected_payload, expected_list):
        raw = {"items": [3, 1, 2]}
        tracking = create_tracking_proxy(raw)
        tracking.add_listener(listener)

        invoke(tracking.proxy["items"])

        listener.assert_called_once_with("arrayMutation", ["items"], expected_payload)
        assert raw["items"] == expected_list

    def test_augmented_assignment_on_local(self, listener):
        raw = {"items": [1]}
        tracking = create_tracking_proxy(raw)
        tracking.add_listener(listener)

        items = tracking.proxy["items"]
        items += [2, 3]
        items *= 2

        assert listener.call_args_list == [
            call("arrayMutation", ["items"], ["extend", [2, 3]]),
            call("arrayMutation", ["items"], ["__imul__", 2]),
        ]
        assert raw["items"] == [1, 2, 3, 1, 2, 3]

    def test_root_list(self, listener):
        raw = [{"x": 1}]
        tracking = create_tracking_proxy(raw)
        tracking.add_listener(listener)

        tracking.proxy.append(2)
        tracking.proxy[0]["x"] = 5

        assert listener.call_args_list == [
            call("arrayMutation", [], ["append", 2]),
            call("set", ["0", "x"], 5),
        ]

    def test_appended_wrapper_is_stored_raw(self, rows, rows_raw):
        first = rows.proxy["foo"][0]
        rows.proxy["foo"].append(first)
        assert rows_raw["foo"][2] is rows_raw["foo"][0]
        assert not is_tracked(rows_raw["foo"][2])


class TestIndexAccess:
    """Index reads, writes and deletes."""

    def test_index_set(self, rows, listener, rows_raw):
        rows.proxy["foo"][1] = {"x": 20}
        listener.assert_called_once_with("set", ["foo", "1"], {"x": 20})
        assert rows_raw["foo"][1] == {"x": 20}

    def test_negative_index_is_normalized(self, rows, listener):
        assert rows.proxy["foo"][-1] is rows.proxy["foo"][1]

        rows.proxy["foo"][-1]["x"] = 3
        listener.assert_called_once_with("set", ["foo", "1", "x"], 3)

    def test_index_delete(self, rows, listener, rows_raw):
        del rows.proxy["foo"][0]
        listener.assert_called_once_with("delete", ["foo", "0"], None)
        assert rows_raw["foo"] == [{"x": 2}]

    def test_out_of_range_write_raises_without_event(self, rows, listener):
        with pytest.raises(IndexError):
            rows.proxy["foo"][10] = 1
        with pytest.raises(IndexError):
            del rows.proxy["foo"][10]
        listener.assert_not_called()

    def test_slice_read_is_raw_copy(self, rows, rows_raw):
        head = rows.proxy["foo"][:1]
        assert head == [{"x": 1}]
        assert not is_tracked(head)
        assert head is not rows_raw["foo"]

    def test_iteration_and_membership(self, rows, rows_raw):
        elements = list(rows.proxy["foo"])
        assert all(is_tracked(element) for element in elements)
        assert elements[0] is rows.proxy["foo"][0]
        assert {"x": 2} in rows.proxy["foo"]
        assert rows.proxy["foo"].index({"x": 2}) == 1


class TestMovedElements:
    """Wrappers of elements that changed position stop reporting."""

    def test_element_wrapper_retired_after_shift(self, rows, listener):
        second = rows.proxy["foo"][1]
        rows.proxy["foo"].pop(0)
        listener.reset_mock()

        assert is_discarded(second)
        second["x"] = 5
        listener.assert_not_called()

        rows.proxy["foo"][0]["x"] = 7
        listener.assert_called_once_with("set", ["foo", "0", "x"], 7)

    def test_unmoved_element_survives_append(self, rows, listener):
        first = rows.proxy["foo"][0]
        rows.proxy["foo"].append({"x": 3})
        listener.reset_mock()

        assert not is_discarded(first)
        first["x"] = 10
        listener.assert_called_once_with("set", ["foo", "0", "x"], 10)


class TestFailedMutation:
    """A failing list call emits nothing and releases suppression."""

    def test_remove_missing_value(self, rows, listener):
        with pytest.raises(ValueError):
            rows.proxy["foo"].remove({"x": 42})
        listener.assert_not_called()
        assert rows._tracker.is_suppressed is False

        rows.proxy["foo"].append(1)
        listener.assert_called_once_with("arrayMutation", ["foo"], ["append", 1])

    def test_sort_type_error(self, listener):
        raw = {"mixed": [1, "a"]}
        tracking = create_tracking_proxy(raw)
        tracking.add_listener(listener)

        with pytest.raises(TypeError):
            tracking.proxy["mixed"].sort()

        listener.assert_not_called()
        tracking.proxy["mixed"][0] = 2
        listener.assert_called_once_with("set", ["mixed", "0"], 2)

    def test_pop_from_empty_list(self, listener):
        tracking = create_tracking_proxy({"empty": []})
        tracking.add_listener(listener)
        with pytest.raises(IndexError):
            tracking.proxy["empty"].pop()
        listener.assert_not_called()
        assert tracking._tracker.is_suppressed is False


class TestNonMutatingOperations:
    """List operations that build new lists return raw lists and emit nothing."""

    def test_copy_concat_repeat(self, listener):
        raw = {"items": [1, 2]}
        tracking = create_tracking_proxy(raw)
        tracking.add_listener(listener)
        items = tracking.proxy["items"]

        copied = items.copy()
        assert copied == [1, 2]
        assert copied is not raw["items"]
        assert not is_tracked(copied)

        assert items + [3] == [1, 2, 3]
        assert [0] + items == [0, 1, 2]
        assert items + items == [1, 2, 1, 2]
        assert items * 2 == [1, 2, 1, 2]
        assert 2 * items == [1, 2, 1, 2]
        assert not is_tracked(items + [3])

        listener.assert_not_called()
        assert raw["items"] == [1, 2]

    def test_ordering_comparisons(self):
        tracking = create_tracking_proxy({"a": [1, 2], "b": [1, 3]})
        a, b = tracking.proxy["a"], tracking.proxy["b"]

        assert a < b
        assert a <= [1, 2]
        assert b > a
        assert b >= [1, 3]
        assert sorted([b, a]) == [[1, 2], [1, 3]]
