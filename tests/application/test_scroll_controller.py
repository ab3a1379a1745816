"""Tests for ScrollPullController: batching, merging and pull serialisation."""

from __future__ import annotations

import itertools
import logging
from types import SimpleNamespace

import pytest

from pullview.application.services.list_store import ChangeKind, ListStore
from pullview.application.services.scroll_controller import (
    PullSession,
    ScrollPullController,
    default_key,
)
from pullview.errors import KeyExtractionError
from pullview.errors.handler import ErrorHandler, ErrorOccurredEvent
from pullview.events.bus import EventBus
from pullview.streams.sources import error, values


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _row(key: str, version: int = 1) -> dict:
    return {"id": key, "v": version}


def _id(item: dict) -> str:
    return item["id"]


def _ids(store: ListStore) -> list[str]:
    return [item["id"] for item in store.items]


def _make(initial: int = 2, pull: int = 3):
    store = ListStore()
    controller = ScrollPullController(store, _id, initial_amount=initial, pull_amount=pull)
    return controller, store


# ---------------------------------------------------------------------------
# Batch sizing
# ---------------------------------------------------------------------------


class TestBatchSizing:
    def test_start_pulls_initial_amount(self):
        store = ListStore()
        controller = ScrollPullController(store, lambda n: n)

        controller.start(values(itertools.count()))

        assert store.items == (0, 1, 2, 3)
        assert store.more_available is True
        assert controller.is_pulling is False

    def test_end_reached_pulls_pull_amount(self):
        store = ListStore()
        controller = ScrollPullController(store, lambda n: n)
        controller.start(values(itertools.count()))

        controller.on_end_reached({"distance_from_end": 0})

        assert len(store.items) == 34
        assert store.items[-1] == 33

    def test_each_batch_commits_once(self):
        store = ListStore()
        controller = ScrollPullController(store, lambda n: n, initial_amount=3, pull_amount=3)
        appends = []
        store.changed.connect(
            lambda snapshot, change: appends.append(change.count)
            if change.kind is ChangeKind.APPEND
            else None
        )

        controller.start(values(itertools.count()))
        controller.on_end_reached()

        assert appends == [3, 3]

    def test_duplicates_do_not_count_towards_the_batch(self):
        store = ListStore()
        controller = ScrollPullController(store, _id, initial_amount=3)

        controller.start(values([_row("a"), _row("a", 2), _row("b"), _row("b", 2), _row("c"), _row("d")]))

        assert _ids(store) == ["a", "b", "c"]
        assert [item["v"] for item in store.items] == [2, 2, 1]

    def test_synchronous_source_longer_than_recursion_limit(self):
        store = ListStore()
        controller = ScrollPullController(store, lambda n: n, initial_amount=2500)

        controller.start(values(range(2500)))

        assert len(store.items) == 2500
        assert store.more_available is True


# ---------------------------------------------------------------------------
# Worked examples
# ---------------------------------------------------------------------------


class TestExamples:
    def test_five_items_initial_two_then_three(self, counting_source):
        source = counting_source(values([_row(k) for k in "abcde"]))
        controller, store = _make(initial=2, pull=3)

        controller.start(source)
        assert _ids(store) == ["a", "b"]
        assert store.more_available is True

        controller.on_end_reached()
        # Batch quota reached on "e"; the end has not been seen yet.
        assert _ids(store) == ["a", "b", "c", "d", "e"]
        assert store.more_available is True

        controller.on_end_reached()
        assert _ids(store) == ["a", "b", "c", "d", "e"]
        assert store.more_available is False
        assert source.requests == 6

    def test_termination_on_fourth_request_of_a_batch(self, counting_source):
        source = counting_source(values([_row(k) for k in "abcde"]))
        controller, store = _make(initial=2, pull=4)

        controller.start(source)
        controller.on_end_reached()

        assert _ids(store) == ["a", "b", "c", "d", "e"]
        assert store.more_available is False
        assert source.requests == 2 + 4

    def test_stalled_source_commits_nothing(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=5)

        controller.start(source)
        source.push(_row("a"))
        source.push(_row("b"))

        assert store.items == ()
        assert store.more_available is True
        assert source.requests == 3
        assert source.pending is not None
        assert controller.session.buffer == [_row("a"), _row("b")]


# ---------------------------------------------------------------------------
# Dedup / in-place update
# ---------------------------------------------------------------------------


class TestMerging:
    def test_known_key_updates_committed_row_immediately(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=2, pull=3)
        controller.start(source)
        source.push(_row("a"))
        source.push(_row("b"))
        assert _ids(store) == ["a", "b"]

        controller.on_end_reached()
        source.push(_row("a", 2))

        # Committed before the batch completes, and the batch keeps pulling.
        assert store.items[0] == _row("a", 2)
        assert controller.is_pulling is True
        assert source.pending is not None

    def test_buffered_key_is_overwritten_until_commit(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=3)
        controller.start(source)

        source.push(_row("a"))
        source.push(_row("a", 2))
        assert store.items == ()

        source.push(_row("b"))
        source.push(_row("c"))

        assert store.items == (_row("a", 2), _row("b"), _row("c"))

    def test_keys_stay_unique_across_batches(self):
        stream = [_row(k, n) for n, k in enumerate("abcabdcae")]
        controller, store = _make(initial=2, pull=2)

        controller.start(values(stream))
        while store.more_available:
            controller.on_end_reached()

        keys = _ids(store)
        assert len(keys) == len(set(keys))
        assert keys == ["a", "b", "c", "d", "e"]
        assert dict((item["id"], item["v"]) for item in store.items) == {
            "a": 7, "b": 4, "c": 6, "d": 5, "e": 8,
        }

    def test_update_emits_update_record(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=1, pull=1)
        controller.start(source)
        source.push(_row("a"))
        changes = []
        store.changed.connect(lambda snapshot, change: changes.append(change))

        controller.on_end_reached()
        source.push(_row("a", 2))

        assert changes[0].kind is ChangeKind.UPDATE
        assert changes[0].start == 0


# ---------------------------------------------------------------------------
# Pull serialisation
# ---------------------------------------------------------------------------


class TestQueuedPulls:
    def test_end_reached_while_pulling_is_queued_once(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=2, pull=5)
        controller.start(source)

        controller.on_end_reached()
        controller.on_end_reached()
        controller.on_end_reached()

        assert controller.queued_amount == 5
        assert source.requests == 1

    def test_queued_amount_last_one_wins(self, manual_source):
        first, second = manual_source(), manual_source()
        controller, store = _make(initial=2, pull=5)
        controller.start(first)

        controller.on_end_reached()
        controller.start(second)

        assert controller.queued_amount == 2

    def test_queued_pull_runs_after_batch(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=2, pull=5)
        controller.start(source)
        controller.on_end_reached()
        controller.on_end_reached()

        source.push(_row("a"))
        source.push(_row("b"))

        assert _ids(store) == ["a", "b"]
        assert controller.queued_amount == 0
        assert controller.session.amount == 5
        assert source.requests == 3

    def test_queued_pull_dropped_once_exhausted(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=2, pull=5)
        controller.start(source)
        controller.on_end_reached()

        source.push(_row("a"))
        source.end()

        assert _ids(store) == ["a"]
        assert store.more_available is False
        assert controller.queued_amount == 0
        assert controller.is_pulling is False
        assert source.requests == 2


# ---------------------------------------------------------------------------
# Exhaustion and errors
# ---------------------------------------------------------------------------


class TestExhaustion:
    def test_end_reached_is_noop_after_termination(self, counting_source):
        source = counting_source(values([_row("a")]))
        controller, store = _make(initial=4)
        controller.start(source)
        requests = source.requests

        controller.on_end_reached()
        controller.on_end_reached()

        assert store.more_available is False
        assert source.requests == requests

    def test_binding_a_fresh_source_resumes(self):
        controller, store = _make(initial=2)
        controller.start(values([_row("a")]))
        assert store.more_available is False

        controller.start(values([_row("b"), _row("c"), _row("d")]))

        assert _ids(store) == ["a", "b", "c"]
        assert store.more_available is True

    def test_start_without_source_only_pulls_when_bound(self):
        controller, store = _make()

        controller.start()
        controller.on_end_reached()

        assert store.items == ()
        assert controller.is_pulling is False


class TestErrors:
    def test_error_ends_like_clean_end_and_keeps_buffer(self, manual_source, caplog):
        source = manual_source()
        controller, store = _make(initial=4)
        controller.start(source)
        source.push(_row("a"))
        source.push(_row("b"))

        with caplog.at_level(logging.WARNING):
            source.end(RuntimeError("connection reset"))

        assert _ids(store) == ["a", "b"]
        assert store.more_available is False
        assert "connection reset" in caplog.text

    def test_error_is_published_through_handler(self):
        bus = EventBus()
        events = []
        bus.subscribe(ErrorOccurredEvent, events.append)
        store = ListStore()
        handler = ErrorHandler(logging.getLogger("test"), bus)
        controller = ScrollPullController(store, _id, error_handler=handler)

        controller.start(error(ValueError("bad page")))

        assert store.more_available is False
        assert len(events) == 1
        assert isinstance(events[0].error, ValueError)
        assert events[0].context == {"stream": "scroll"}

    def test_source_raising_is_an_error_end(self):
        def source(abort, callback):
            raise OSError("disk gone")

        controller, store = _make()
        controller.start(source)

        assert store.more_available is False
        assert controller.is_pulling is False

    def test_missing_key_extractor_is_rejected(self):
        with pytest.raises(KeyExtractionError):
            ScrollPullController(ListStore(), None)


# ---------------------------------------------------------------------------
# stop / rebind
# ---------------------------------------------------------------------------


class TestStop:
    def test_stop_resets_list(self):
        controller, store = _make(initial=2)
        controller.start(values([_row("a")]))
        assert store.more_available is False

        controller.stop()

        assert store.items == ()
        assert store.more_available is True

    def test_stop_terminates_source(self, manual_source):
        source = manual_source()
        controller, _ = _make()
        controller.start(source)

        controller.stop()

        assert source.aborts == 1
        assert controller.source is None

    def test_late_reply_after_stop_is_dropped(self, manual_source):
        source = manual_source()
        controller, store = _make(initial=2)
        controller.start(source)
        source.push(_row("a"))

        controller.stop()
        source.push(_row("b"))

        assert store.items == ()
        assert controller.is_pulling is False

    def test_end_reached_after_stop_is_noop(self, manual_source):
        source = manual_source()
        controller, store = _make()
        controller.start(source)
        controller.stop()

        controller.on_end_reached()

        assert controller.is_pulling is False
        assert source.requests == 1

    def test_restart_after_stop(self, manual_source):
        first, second = manual_source(), manual_source()
        controller, store = _make(initial=1)
        controller.start(first)
        controller.stop()

        controller.start(second)
        first.push(_row("stale"))
        second.push(_row("fresh"))

        assert _ids(store) == ["fresh"]


class TestRebind:
    def test_rebind_mid_flight_keeps_buffer(self, manual_source):
        old, new = manual_source(), manual_source()
        controller, store = _make(initial=3)
        controller.start(old)
        old.push(_row("a"))

        controller.start(new)
        assert new.requests == 0

        old.push(_row("b"))
        assert new.requests == 1

        new.push(_row("c"))

        assert _ids(store) == ["a", "b", "c"]
        assert store.more_available is True
        # The initial pull queued by the rebind follows on the new source.
        assert new.requests == 2
        assert controller.session.amount == 3

    def test_superseded_source_ending_does_not_exhaust(self, manual_source):
        old, new = manual_source(), manual_source()
        controller, store = _make(initial=3)
        controller.start(old)
        old.push(_row("a"))
        controller.start(new)

        old.end()

        assert _ids(store) == ["a"]
        assert store.more_available is True
        assert new.requests == 1


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class TestDefaultKey:
    def test_mapping_key(self):
        assert default_key({"key": "k1"}) == "k1"

    def test_attribute_key(self):
        assert default_key(SimpleNamespace(key="k2")) == "k2"

    def test_missing_key_raises(self):
        with pytest.raises(KeyExtractionError):
            default_key({"id": 1})

    def test_session_position(self):
        session = PullSession(amount=3)
        session.add("a", _row("a"))
        assert session.position("a") == 0
        assert session.position("b") == -1
        assert session.full is False
