from __future__ import annotations

from platewatch.votes.models import CategoryVote, UserVoteRecord
from platewatch.votes.session import (
    LOCAL_VOTES_KEY,
    clear_local_record,
    load_local_record,
    save_local_record,
)


def test_round_trip_through_session():
    session: dict = {}
    record = UserVoteRecord(category_votes={"BBQ": CategoryVote(top_id="a")}, overall_top_pick="b")
    save_local_record(session, record)
    assert LOCAL_VOTES_KEY in session
    assert load_local_record(session) == record


def test_empty_session_starts_fresh():
    assert load_local_record({}) == UserVoteRecord()


def test_older_schema_versions_are_dropped():
    session = {"user_votes_v3": {"votes": {"BBQ": "a"}}, "user": {"username": "alice"}}
    assert load_local_record(session) == UserVoteRecord()
    assert "user_votes_v3" not in session
    assert "user" in session


def test_unreadable_payload_starts_fresh():
    session = {LOCAL_VOTES_KEY: {"category_votes": "not a mapping"}}
    assert load_local_record(session) == UserVoteRecord()
    assert LOCAL_VOTES_KEY not in session


def test_clear_local_record():
    session: dict = {}
    save_local_record(session, UserVoteRecord(overall_top_pick="a"))
    clear_local_record(session)
    assert session == {}
