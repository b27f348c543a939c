from __future__ import annotations

import random

from platewatch.votes.deltas import net_points
from platewatch.votes.ledger import (
    active_vote_count,
    prune_record,
    set_category_vote,
    set_overall_pick,
)
from platewatch.votes.models import CategoryVote, UserVoteRecord, VoteSlot

TOP = VoteSlot.top
RUNNER_UP = VoteSlot.runner_up


def _points_held(record: UserVoteRecord, rid: str) -> int:
    points = 0
    for vote in record.category_votes.values():
        if vote.top_id == rid:
            points += 100
        if vote.runner_up_id == rid:
            points += 25
    if record.overall_top_pick == rid:
        points += 500
    return points


# ── Category votes ───────────────────────────────────────────────────────


def test_first_top_vote_creates_category():
    t = set_category_vote(UserVoteRecord(), "BBQ", "a", TOP)
    assert t.record.category_votes["BBQ"].top_id == "a"
    assert [(d.restaurant_id, d.delta) for d in t.deltas] == [("a", 100)]


def test_input_record_is_not_mutated():
    original = UserVoteRecord()
    set_category_vote(original, "BBQ", "a", TOP)
    assert original == UserVoteRecord()


def test_toggle_off_same_slot():
    first = set_category_vote(UserVoteRecord(), "BBQ", "a", RUNNER_UP)
    second = set_category_vote(first.record, "BBQ", "a", RUNNER_UP)
    assert [(d.restaurant_id, d.delta) for d in second.deltas] == [("a", -25)]
    assert "BBQ" not in second.record.category_votes


def test_toggle_twice_restores_original_and_nets_zero():
    start = set_category_vote(UserVoteRecord(), "Tacos", "x", TOP).record
    once = set_category_vote(start, "BBQ", "a", TOP)
    twice = set_category_vote(once.record, "BBQ", "a", TOP)
    assert twice.record == start
    assert net_points(once.deltas + twice.deltas).get("a", 0) == 0


def test_replacing_slot_holder_removes_old_first():
    t1 = set_category_vote(UserVoteRecord(), "BBQ", "a", TOP)
    t2 = set_category_vote(t1.record, "BBQ", "b", TOP)
    assert [(d.restaurant_id, d.delta) for d in t2.deltas] == [("a", -100), ("b", 100)]
    assert t2.record.category_votes["BBQ"].top_id == "b"


def test_moving_restaurant_between_slots():
    t1 = set_category_vote(UserVoteRecord(), "BBQ", "b", RUNNER_UP)
    t2 = set_category_vote(t1.record, "BBQ", "b", TOP)
    assert [(d.restaurant_id, d.delta) for d in t2.deltas] == [("b", -25), ("b", 100)]
    vote = t2.record.category_votes["BBQ"]
    assert vote.top_id == "b"
    assert vote.runner_up_id is None


def test_moving_into_occupied_slot_emits_three_deltas():
    record = UserVoteRecord(category_votes={"BBQ": CategoryVote(top_id="b", runner_up_id="a")})
    t = set_category_vote(record, "BBQ", "a", TOP)
    assert [(d.restaurant_id, d.delta) for d in t.deltas] == [("a", -25), ("b", -100), ("a", 100)]
    assert t.record.category_votes["BBQ"] == CategoryVote(top_id="a", runner_up_id=None)


def test_categories_are_independent():
    t1 = set_category_vote(UserVoteRecord(), "BBQ", "a", TOP)
    t2 = set_category_vote(t1.record, "Tacos", "b", TOP)
    assert t2.record.category_votes["BBQ"].top_id == "a"
    assert t2.record.category_votes["Tacos"].top_id == "b"
    assert [d.delta for d in t2.deltas] == [100]


def test_scenario_top_then_runner_up_then_promote():
    record = UserVoteRecord()
    record = set_category_vote(record, "BBQ", "A", TOP).record
    record = set_category_vote(record, "BBQ", "B", RUNNER_UP).record
    last = set_category_vote(record, "BBQ", "B", TOP)
    assert [(d.restaurant_id, d.delta) for d in last.deltas] == [
        ("B", -25), ("A", -100), ("B", 100),
    ]
    assert _points_held(last.record, "A") == 0
    assert _points_held(last.record, "B") == 100


# ── Overall pick ─────────────────────────────────────────────────────────


def test_overall_pick_moves_between_restaurants():
    t1 = set_overall_pick(UserVoteRecord(), "A")
    t2 = set_overall_pick(t1.record, "B")
    assert [(d.restaurant_id, d.delta) for d in t2.deltas] == [("A", -500), ("B", 500)]
    assert t2.record.overall_top_pick == "B"


def test_overall_pick_toggles_off():
    t1 = set_overall_pick(UserVoteRecord(), "A")
    t2 = set_overall_pick(t1.record, "A")
    assert t2.record.overall_top_pick is None
    assert [d.delta for d in t2.deltas] == [-500]


def test_overall_pick_is_independent_of_category_votes():
    record = set_category_vote(UserVoteRecord(), "BBQ", "A", TOP).record
    t = set_overall_pick(record, "A")
    assert t.record.category_votes["BBQ"].top_id == "A"
    assert _points_held(t.record, "A") == 600


# ── Random sequences ─────────────────────────────────────────────────────


def _random_walk(seed: int, steps: int = 300):
    rng = random.Random(seed)
    restaurants = ["a", "b", "c", "d"]
    categories = ["BBQ", "Tacos", "Pizza"]
    record = UserVoteRecord()
    deltas = []
    for _ in range(steps):
        if rng.random() < 0.2:
            t = set_overall_pick(record, rng.choice(restaurants))
        else:
            t = set_category_vote(
                record, rng.choice(categories), rng.choice(restaurants),
                rng.choice([TOP, RUNNER_UP]),
            )
        record = t.record
        deltas.extend(t.deltas)
        yield record, deltas


def test_top_and_runner_up_never_share_a_restaurant():
    for seed in range(5):
        for record, _ in _random_walk(seed):
            for vote in record.category_votes.values():
                assert vote.top_id != vote.runner_up_id


def test_delta_sums_match_final_ballot():
    for seed in range(5):
        for record, deltas in _random_walk(seed):
            pass
        totals = net_points(deltas)
        for rid in ["a", "b", "c", "d"]:
            assert totals.get(rid, 0) == _points_held(record, rid)


def test_overall_contribution_is_zero_or_five_hundred():
    for record, deltas in _random_walk(11):
        overall = sum(d.delta for d in deltas if d.slot is VoteSlot.overall)
        assert overall in (0, 500)
        assert (overall == 500) == (record.overall_top_pick is not None)


# ── Pruning ──────────────────────────────────────────────────────────────


def test_prune_drops_votes_for_moved_and_deleted_restaurants():
    record = UserVoteRecord(
        category_votes={
            "Pizza": CategoryVote(top_id="x", runner_up_id="y"),
            "BBQ": CategoryVote(top_id="gone"),
        },
        overall_top_pick="gone",
    )
    pruned = prune_record(record, {"x": "Tacos", "y": "Pizza"})
    assert pruned.category_votes == {"Pizza": CategoryVote(top_id=None, runner_up_id="y")}
    assert pruned.overall_top_pick is None


def test_prune_keeps_matching_votes():
    record = UserVoteRecord(
        category_votes={"Pizza": CategoryVote(top_id="x")}, overall_top_pick="x",
    )
    assert prune_record(record, {"x": "Pizza"}) == record


def test_active_vote_count():
    record = UserVoteRecord(
        category_votes={
            "Pizza": CategoryVote(top_id="x", runner_up_id="y"),
            "BBQ": CategoryVote(runner_up_id="z"),
        },
        overall_top_pick="x",
    )
    assert active_vote_count(record) == 3
