"""Judge score and leaderboard models."""

from dataclasses import dataclass, field, fields

# Points available per criterion
MAX_CRITERION_SCORE = 20


@dataclass
class ScoreCriteria:
    """Per-criterion points awarded by one judge."""

    innovation: int = 0
    engineering: int = 0
    defense: int = 0
    control: int = 0
    presentation: int = 0

    @property
    def total(self) -> int:
        return sum(getattr(self, f.name) for f in fields(self))

    @classmethod
    def from_dict(cls, data: dict | None) -> "ScoreCriteria":
        """Build from stored JSON, defaulting missing criteria to 0."""
        data = data or {}
        return cls(**{f.name: int(data.get(f.name) or 0) for f in fields(cls)})

    def to_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class Score:
    """One judge's score for one team."""

    team_id: str
    judge_id: str
    criteria: ScoreCriteria
    comments: str | None = None
    id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    team_name: str | None = None
    judge_name: str | None = None

    @property
    def total_score(self) -> int:
        return self.criteria.total


@dataclass
class LeaderboardEntry:
    """Aggregated standing of an accepted team."""

    team_id: str
    name: str
    name_en: str
    total_score: int = 0
    scores_count: int = 0
    average_score: int = 0
    judges: list[str] = field(default_factory=list)
