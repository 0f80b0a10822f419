"""Tests for signalfeed.feed.merge."""

from __future__ import annotations

from conftest import build_signal
from signalfeed.feed.merge import append_unseen, dedupe, filter_by_traders, merge_by_id


class TestDedupe:
    def test_first_position_last_value(self) -> None:
        a1 = build_signal("a", minutes_ago=1, currency="OLD")
        b = build_signal("b", minutes_ago=2)
        a2 = build_signal("a", minutes_ago=1, currency="NEW")
        result = dedupe([a1, b, a2])
        assert [s.id for s in result] == ["a", "b"]
        assert result[0].currency == "NEW"

    def test_empty(self) -> None:
        assert dedupe([]) == []


class TestMergeById:
    def test_sorted_newest_first(self) -> None:
        longs = [build_signal("l1", minutes_ago=1), build_signal("l3", minutes_ago=3)]
        shorts = [build_signal("s2", direction="short", minutes_ago=2)]
        assert [s.id for s in merge_by_id(longs, shorts)] == ["l1", "s2", "l3"]

    def test_equal_times_keep_merge_order(self) -> None:
        first = build_signal("x", minutes_ago=5)
        second = build_signal("y", direction="short", minutes_ago=5)
        assert [s.id for s in merge_by_id([first], [second])] == ["x", "y"]

    def test_union_without_duplicates(self) -> None:
        a = [build_signal(f"s{i}", minutes_ago=i) for i in range(0, 10, 2)]
        b = [build_signal(f"s{i}", minutes_ago=i) for i in range(0, 10, 3)]
        merged = merge_by_id(a, b)
        ids = [s.id for s in merged]
        assert len(ids) == len(set(ids))
        assert set(ids) == {s.id for s in a} | {s.id for s in b}


class TestAppendUnseen:
    def test_appends_only_new(self) -> None:
        existing = [build_signal("a"), build_signal("b", minutes_ago=1)]
        incoming = [build_signal("b", minutes_ago=1), build_signal("c", minutes_ago=2)]
        out, added = append_unseen(existing, incoming)
        assert [s.id for s in out] == ["a", "b", "c"]
        assert added == 1
        assert len(existing) == 2

    def test_duplicates_within_incoming(self) -> None:
        out, added = append_unseen([], [build_signal("a"), build_signal("a")])
        assert [s.id for s in out] == ["a"]
        assert added == 1


class TestFilterByTraders:
    def test_keeps_listed_traders(self) -> None:
        signals = [build_signal("a", "t1"), build_signal("b", "t2"), build_signal("c", "t3")]
        assert [s.id for s in filter_by_traders(signals, {"t1", "t3"})] == ["a", "c"]

    def test_empty_allowed_set(self) -> None:
        assert filter_by_traders([build_signal("a")], set()) == []
