from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field, field_validator

TOP_CHOICE_POINTS = 100
RUNNER_UP_POINTS = 25
OVERALL_PICK_POINTS = 500


class VoteSlot(str, Enum):
    top = "top"
    runner_up = "runnerUp"
    overall = "overall"

    @property
    def points(self) -> int:
        return SLOT_POINTS[self]

    @property
    def other(self) -> VoteSlot:
        """The competing slot in the same category."""
        if self is VoteSlot.top:
            return VoteSlot.runner_up
        if self is VoteSlot.runner_up:
            return VoteSlot.top
        raise ValueError("overall pick has no competing slot")


SLOT_POINTS: dict[VoteSlot, int] = {
    VoteSlot.top: TOP_CHOICE_POINTS,
    VoteSlot.runner_up: RUNNER_UP_POINTS,
    VoteSlot.overall: OVERALL_PICK_POINTS,
}


class CategoryVote(BaseModel):
    top_id: str | None = None
    runner_up_id: str | None = None

    def holder(self, slot: VoteSlot) -> str | None:
        if slot is VoteSlot.top:
            return self.top_id
        if slot is VoteSlot.runner_up:
            return self.runner_up_id
        raise ValueError(f"{slot.value} is not a category slot")

    def is_empty(self) -> bool:
        return self.top_id is None and self.runner_up_id is None


class UserVoteRecord(BaseModel):
    category_votes: dict[str, CategoryVote] = Field(default_factory=dict)
    overall_top_pick: str | None = None


@dataclass(frozen=True)
class ScoreDelta:
    """A signed point change for one restaurant.

    ``slot`` and ``category`` identify which ballot slot the change belongs
    to (``category`` is ``None`` for the overall pick).
    """

    restaurant_id: str
    delta: int
    slot: VoteSlot
    category: str | None = None

    @property
    def is_removal(self) -> bool:
        return self.delta < 0

    def to_dict(self) -> dict:
        return {
            "restaurant_id": self.restaurant_id,
            "delta": self.delta,
            "slot": self.slot.value,
            "category": self.category,
        }


@dataclass
class VoteTransition:
    record: UserVoteRecord
    deltas: list[ScoreDelta]


class CategoryVoteRequest(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    slot: VoteSlot

    @field_validator("slot")
    @classmethod
    def _category_slot_only(cls, slot: VoteSlot) -> VoteSlot:
        if slot is VoteSlot.overall:
            raise ValueError("use /votes/overall for the overall pick")
        return slot


class OverallVoteRequest(BaseModel):
    restaurant_id: str = Field(..., min_length=1)


class BallotSummary(BaseModel):
    active_votes: int
    ballot_impact: int
    authenticated: bool


class VoteResponse(BaseModel):
    record: UserVoteRecord
    deltas: list[dict]
    summary: BallotSummary
