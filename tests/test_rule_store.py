# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for RuleStore: ordering, add/remove, snapshots, invalidation hooks."""

from __future__ import annotations

import threading

import pytest

from ctxdetect.builtin_rules import BUILT_IN_RULES
from ctxdetect.models import Rule
from ctxdetect.rule_store import RuleStore, order_rules


def _rule(client_id: str, priority: int = 0) -> Rule:
    return Rule(client_id=client_id, patterns=(f"*://{client_id}.example/*",), priority=priority)


class TestOrdering:
    def test_descending_priority(self):
        ordered = order_rules([_rule("low", 1), _rule("high", 20), _rule("mid", 5)])
        assert [r.client_id for r in ordered] == ["high", "mid", "low"]

    def test_ties_keep_input_order(self):
        ordered = order_rules([_rule("a", 3), _rule("b", 3), _rule("c", 3)])
        assert [r.client_id for r in ordered] == ["a", "b", "c"]

    def test_builtins_precede_custom_of_equal_priority(self):
        store = RuleStore()
        store.add_rule(_rule("custom", 10))
        ids = [r.client_id for r in store.all_rules()]
        assert ids[-1] == "custom"
        assert ids[:-1] == [r.client_id for r in BUILT_IN_RULES]

    def test_higher_custom_goes_first(self):
        store = RuleStore()
        store.add_rule(_rule("urgent", 11))
        store.add_rule(_rule("background", -1))
        ids = [r.client_id for r in store.all_rules()]
        assert ids[0] == "urgent"
        assert ids[-1] == "background"

    def test_default_priority_after_builtins(self):
        store = RuleStore()
        store.add_rule(_rule("plain"))
        assert store.all_rules()[-1].client_id == "plain"


class TestMutation:
    def test_add_appends_to_customs(self):
        store = RuleStore(builtin_rules=())
        store.add_rule(_rule("a"))
        store.add_rule(_rule("b"))
        assert [r.client_id for r in store.custom_rules()] == ["a", "b"]

    def test_remove_all_with_id(self):
        store = RuleStore(builtin_rules=())
        store.add_rule(_rule("a"))
        store.add_rule(_rule("b"))
        store.add_rule(_rule("a", 4))
        assert store.remove_rule("a") == 2
        assert [r.client_id for r in store.all_rules()] == ["b"]

    def test_remove_missing_returns_zero(self):
        store = RuleStore(builtin_rules=())
        assert store.remove_rule("nope") == 0

    def test_builtins_not_removable(self):
        store = RuleStore()
        assert store.remove_rule("jira") == 0
        assert any(r.client_id == "jira" for r in store.all_rules())

    def test_remove_only_custom_copy_of_builtin_id(self):
        store = RuleStore()
        store.add_rule(_rule("jira", 50))
        assert store.all_rules()[0].priority == 50
        assert store.remove_rule("jira") == 1
        assert sum(1 for r in store.all_rules() if r.client_id == "jira") == 1

    def test_generation_bumps(self):
        store = RuleStore()
        g0 = store.generation
        store.add_rule(_rule("a"))
        store.remove_rule("a")
        assert store.generation == g0 + 2

    def test_none_priority_becomes_zero(self):
        assert Rule("x", priority=None).priority == 0

    def test_string_priority_coerced(self):
        assert Rule("x", priority="7").priority == 7

    def test_failed_add_leaves_store_usable(self):
        store = RuleStore()
        store.add_rule(_rule("first", 3))
        before = (store.all_rules(), store.custom_rules(), store.generation)
        notified = []
        store.subscribe(lambda: notified.append(True))

        broken = _rule("broken")
        object.__setattr__(broken, "priority", "high")
        with pytest.raises(TypeError):
            store.add_rule(broken)

        assert (store.all_rules(), store.custom_rules(), store.generation) == before
        assert notified == []

        store.add_rule(_rule("second", 1))
        assert [r.client_id for r in store.custom_rules()] == ["first", "second"]
        assert notified == [True]


class TestSnapshots:
    def test_snapshot_unchanged_by_later_mutation(self):
        store = RuleStore(builtin_rules=())
        store.add_rule(_rule("a"))
        snapshot = store.all_rules()
        store.add_rule(_rule("b"))
        store.remove_rule("a")
        assert [r.client_id for r in snapshot] == ["a"]
        assert [r.client_id for r in store.all_rules()] == ["b"]

    def test_snapshot_is_tuple(self):
        assert isinstance(RuleStore().all_rules(), tuple)

    def test_rule_lists_become_tuples(self):
        patterns = ["*://a.example/*"]
        rule = Rule(client_id="a", patterns=patterns, domain_hints=["a"])
        patterns.append("*")
        assert rule.patterns == ("*://a.example/*",)
        assert rule.domain_hints == ("a",)

    def test_concurrent_adds_are_all_kept(self):
        store = RuleStore(builtin_rules=())

        def worker(n: int) -> None:
            for i in range(50):
                store.add_rule(_rule(f"w{n}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.all_rules()) == 200


class TestSubscribers:
    def test_called_on_every_mutation(self):
        store = RuleStore()
        calls = []
        store.subscribe(lambda: calls.append(store.generation))
        store.add_rule(_rule("a"))
        store.remove_rule("a")
        store.remove_rule("missing")
        assert len(calls) == 3

    def test_sees_new_rules_when_called(self):
        store = RuleStore(builtin_rules=())
        seen = []
        store.subscribe(lambda: seen.append(len(store.all_rules())))
        store.add_rule(_rule("a"))
        assert seen == [1]

    def test_unsubscribe(self):
        store = RuleStore()
        calls = []
        unsubscribe = store.subscribe(lambda: calls.append(1))
        unsubscribe()
        unsubscribe()
        store.add_rule(_rule("a"))
        assert calls == []
