#!/usr/bin/env python3
"""Seed a DuckDB database with demo profiles, teams and scores.

Handy for trying the frontend against a populated backend.

Usage:
    uv run python scripts/seed_demo_data.py [database_path]

Default database_path: data/roborumble.duckdb (relative to repo root)
"""
import sys
from pathlib import Path

from robo_rumble.models.scores import ScoreCriteria
from robo_rumble.models.status import TeamStatus, UserRole
from robo_rumble.repositories.competition_repository import CompetitionRepository
from robo_rumble.services.composition_validator import evaluate_composition

DEMO_TEAMS = {
    "Sand Storm": ["driver", "programmer", "electronics", "mechanics_designer", "mechanics_designer"],
    "Falcon Bots": ["driver", "programmer", "electronics", "mechanics_designer"],
    "Circuit Breakers": ["driver", "programmer", "electronics"],
}


def seed(db_path: Path) -> None:
    if db_path.exists():
        db_path.unlink()
        print(f"Removed existing {db_path}")

    repo = CompetitionRepository(db_path)

    repo.upsert_profile("admin", "admin@roborumble.test", "Admin")
    repo.grant_user_role("admin", UserRole.ADMIN)
    for judge in ("judge1", "judge2"):
        repo.upsert_profile(judge, f"{judge}@roborumble.test", judge.title())
        repo.grant_user_role(judge, UserRole.JUDGE)

    for team_index, (name, roles) in enumerate(DEMO_TEAMS.items()):
        user_ids = [f"t{team_index}_u{i}" for i in range(len(roles))]
        for user_id in user_ids:
            repo.upsert_profile(user_id, f"{user_id}@roborumble.test", user_id.upper())

        team_id = repo.create_team(name, leader_id=user_ids[0], leader_role=roles[0])
        for user_id, role in zip(user_ids[1:], roles[1:]):
            repo.add_member(team_id, user_id, role)

        report = evaluate_composition(repo.get_memberships(team_id))
        if report.registrable:
            repo.set_team_status(team_id, TeamStatus.ACCEPTED, submitted=True)
            for offset, judge in enumerate(("judge1", "judge2")):
                repo.upsert_score(team_id, judge, ScoreCriteria(
                    innovation=15 - team_index + offset,
                    engineering=14,
                    defense=12 + offset,
                    control=16 - team_index,
                    presentation=13,
                ))
        status = "accepted" if report.registrable else "incomplete"
        print(f"  ✓ {name}: {report.team_size} members, {status}")

    repo.close()


def main():
    if len(sys.argv) > 1:
        db_path = Path(sys.argv[1])
    else:
        # backend/scripts -> backend -> repo root
        repo_root = Path(__file__).parent.parent.parent
        db_path = repo_root / "data" / "roborumble.duckdb"

    seed(db_path)
    print(f"\nDone! Database ready at: {db_path}")


if __name__ == "__main__":
    main()
