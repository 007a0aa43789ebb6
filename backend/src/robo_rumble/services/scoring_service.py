"""Judge scoring and leaderboard aggregation."""

import logging
from dataclasses import fields
from typing import Iterable

from robo_rumble.errors import NotFoundError, PermissionDeniedError, RuleViolationError
from robo_rumble.models.scores import MAX_CRITERION_SCORE, LeaderboardEntry, Score, ScoreCriteria
from robo_rumble.models.status import TeamStatus, UserRole
from robo_rumble.models.team import Team

logger = logging.getLogger(__name__)


def validate_criteria(criteria: ScoreCriteria) -> None:
    """Every criterion must be within 0..MAX_CRITERION_SCORE."""
    for f in fields(criteria):
        value = getattr(criteria, f.name)
        if not 0 <= value <= MAX_CRITERION_SCORE:
            raise RuleViolationError(
                f"{f.name} must be between 0 and {MAX_CRITERION_SCORE}",
                code="criterion_out_of_range",
                criterion=f.name,
            )


def build_leaderboard(teams: Iterable[Team], scores: Iterable[Score]) -> list[LeaderboardEntry]:
    """Aggregate scores per team, highest total first.

    Only teams passed in are ranked; scores for other teams are ignored.
    Ties are broken by team name so the order is stable.
    """
    totals: dict[str, tuple[int, int, list[str]]] = {}
    for score in scores:
        total, count, judges = totals.get(score.team_id, (0, 0, []))
        totals[score.team_id] = (total + score.total_score, count + 1, judges + [score.judge_id])

    entries = []
    for team in teams:
        total, count, judges = totals.get(team.id, (0, 0, []))
        entries.append(LeaderboardEntry(
            team_id=team.id,
            name=team.name_ar or team.name,
            name_en=team.name,
            total_score=total,
            scores_count=count,
            average_score=int(total / count + 0.5) if count else 0,
            judges=judges,
        ))

    entries.sort(key=lambda e: (-e.total_score, e.name_en))
    return entries


class ScoringService:
    """Stores judge scores and builds the leaderboard."""

    def __init__(self, repository):
        self.repository = repository

    def submit_score(
        self,
        judge_id: str,
        team_id: str,
        criteria: ScoreCriteria,
        comments: str | None = None,
    ) -> Score:
        roles = self.repository.get_user_roles(judge_id)
        if UserRole.JUDGE not in roles and UserRole.ADMIN not in roles:
            raise PermissionDeniedError("Only judges can submit scores")

        team = self.repository.get_team(team_id)
        if team is None:
            raise NotFoundError(f"Team not found: {team_id}")
        if team.status != TeamStatus.ACCEPTED:
            raise RuleViolationError("Only accepted teams can be scored", code="team_not_accepted")

        validate_criteria(criteria)
        self.repository.upsert_score(team_id, judge_id, criteria, comments)
        logger.info(f"Judge {judge_id} scored team {team_id}: {criteria.total}")

        return next(s for s in self.repository.list_scores(team_id) if s.judge_id == judge_id)

    def list_scores(self, team_id: str | None = None) -> list[Score]:
        return self.repository.list_scores(team_id)

    def leaderboard(self) -> list[LeaderboardEntry]:
        teams = self.repository.list_teams(TeamStatus.ACCEPTED)
        return build_leaderboard(teams, self.repository.list_scores())
