"""REST endpoints for judge scoring and the public leaderboard."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from robo_rumble.api.deps import CurrentUser, get_scoring_service
from robo_rumble.models.scores import MAX_CRITERION_SCORE, Score, ScoreCriteria
from robo_rumble.services.scoring_service import ScoringService

router = APIRouter(prefix="/api", tags=["scores"])

Scoring = Annotated[ScoringService, Depends(get_scoring_service)]

Points = Annotated[int, Field(ge=0, le=MAX_CRITERION_SCORE)]


class CriteriaIn(BaseModel):
    innovation: Points = 0
    engineering: Points = 0
    defense: Points = 0
    control: Points = 0
    presentation: Points = 0


class ScoreRequest(BaseModel):
    criteria: CriteriaIn
    comments: str | None = Field(default=None, max_length=2000)


def _serialize_score(score: Score) -> dict:
    data = asdict(score)
    data["total_score"] = score.total_score
    return data


@router.put("/scores/{team_id}")
def submit_score(team_id: str, body: ScoreRequest, user_id: CurrentUser, scoring: Scoring):
    """Create or replace the caller's score for a team."""
    criteria = ScoreCriteria(**body.criteria.model_dump())
    return _serialize_score(scoring.submit_score(user_id, team_id, criteria, body.comments))


@router.get("/scores")
def list_scores(scoring: Scoring, team_id: str | None = None):
    return {"scores": [_serialize_score(s) for s in scoring.list_scores(team_id)]}


@router.get("/leaderboard")
def get_leaderboard(scoring: Scoring):
    """Accepted teams ranked by total score."""
    return {
        "leaderboard": [
            {"rank": rank, **asdict(entry)}
            for rank, entry in enumerate(scoring.leaderboard(), start=1)
        ]
    }
