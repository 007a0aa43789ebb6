"""DuckDB-based data access for teams, join requests, scores and settings."""

import json
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator

import duckdb
import pandas as pd

from robo_rumble.models.roles import Membership
from robo_rumble.models.scores import Score, ScoreCriteria
from robo_rumble.models.status import (
    JoinRequestStatus,
    PreparationStatus,
    TeamStatus,
    UserRole,
    parse_team_status,
)
from robo_rumble.models.team import JoinRequest, Team, TeamMember
from robo_rumble.utils.role_normalizer import role_from_message, sort_by_role

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS profiles (
        user_id VARCHAR PRIMARY KEY,
        email VARCHAR NOT NULL,
        full_name VARCHAR,
        phone VARCHAR,
        university VARCHAR,
        updated_at VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_roles (
        user_id VARCHAR NOT NULL,
        role VARCHAR NOT NULL,
        PRIMARY KEY (user_id, role)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS teams (
        id VARCHAR PRIMARY KEY,
        name VARCHAR NOT NULL,
        name_ar VARCHAR,
        description VARCHAR,
        leader_id VARCHAR,
        max_members INTEGER,
        status VARCHAR,
        preparation_status VARCHAR,
        created_at VARCHAR,
        updated_at VARCHAR,
        submitted_at VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS team_members (
        id VARCHAR PRIMARY KEY,
        team_id VARCHAR NOT NULL,
        user_id VARCHAR NOT NULL UNIQUE,
        team_role VARCHAR,
        joined_at VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS join_requests (
        id VARCHAR PRIMARY KEY,
        team_id VARCHAR NOT NULL,
        user_id VARCHAR NOT NULL,
        team_role VARCHAR,
        message VARCHAR,
        status VARCHAR,
        created_at VARCHAR,
        updated_at VARCHAR,
        UNIQUE (team_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS scores (
        id VARCHAR PRIMARY KEY,
        team_id VARCHAR NOT NULL,
        judge_id VARCHAR NOT NULL,
        criteria VARCHAR NOT NULL,
        total_score INTEGER NOT NULL,
        comments VARCHAR,
        created_at VARCHAR,
        updated_at VARCHAR,
        UNIQUE (team_id, judge_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS system_settings (
        key VARCHAR PRIMARY KEY,
        value VARCHAR NOT NULL,
        updated_at VARCHAR,
        updated_by VARCHAR
    )
    """,
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _new_id() -> str:
    return uuid.uuid4().hex


class CompetitionRepository:
    """Data access layer - parameterized DuckDB queries against one database file."""

    def __init__(self, database_path: str | Path, default_max_members: int = 5):
        """Open (or create) the database and make sure the schema exists.

        Args:
            database_path: Path to the .duckdb file, or ":memory:" for tests
            default_max_members: Seat count used when a team row has none
        """
        self._db_path = str(database_path)
        self._default_max_members = default_max_members

        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        # One base connection; every operation works on its own cursor so
        # request threads never share a cursor.
        self._conn = duckdb.connect(self._db_path)
        self._write_lock = threading.Lock()
        for statement in SCHEMA:
            self._conn.execute(statement)

        tables = self._conn.execute("SHOW TABLES").fetchall()
        logger.info(f"CompetitionRepository: Using {self._db_path} ({len(tables)} tables)")

    def close(self) -> None:
        self._conn.close()

    def _query(self, sql: str, params: list | None = None) -> list[dict]:
        """Execute query and return list of dicts with proper type conversion."""
        with self._conn.cursor() as cur:
            df = cur.execute(sql, params or []).df()

        if df.empty:
            return []

        # Convert NaN/NaT to None so rows are JSON-serializable
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict(orient="records")

    def _execute(self, sql: str, params: list | None = None) -> None:
        with self._write_lock, self._conn.cursor() as cur:
            cur.execute(sql, params or [])

    @contextmanager
    def _transaction(self) -> Iterator[duckdb.DuckDBPyConnection]:
        """Hold the write lock and run the block in one transaction.

        Any exception raised inside the block, including a rejected rule
        check, rolls the transaction back and propagates.
        """
        with self._write_lock, self._conn.cursor() as cur:
            cur.execute("BEGIN TRANSACTION")
            try:
                yield cur
            except Exception:
                cur.execute("ROLLBACK")
                raise
            cur.execute("COMMIT")

    @staticmethod
    def _read_memberships(cur, team_id: str) -> list[Membership]:
        rows = cur.execute(
            "SELECT user_id, team_role FROM team_members WHERE team_id = ?", [team_id]
        ).fetchall()
        return [Membership(member_id=user_id, role=role) for user_id, role in rows]

    # ------------------------------------------------------------------
    # Profiles and permission roles
    # ------------------------------------------------------------------

    def upsert_profile(
        self,
        user_id: str,
        email: str,
        full_name: str | None = None,
        phone: str | None = None,
        university: str | None = None,
    ) -> dict:
        self._execute(
            """
            INSERT INTO profiles (user_id, email, full_name, phone, university, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (user_id) DO UPDATE SET
                email = excluded.email,
                full_name = excluded.full_name,
                phone = excluded.phone,
                university = excluded.university,
                updated_at = excluded.updated_at
            """,
            [user_id, email, full_name, phone, university, _now()],
        )
        return self.get_profile(user_id)

    def get_profile(self, user_id: str) -> dict | None:
        results = self._query("SELECT * FROM profiles WHERE user_id = ?", [user_id])
        return results[0] if results else None

    def get_display_names(self, user_ids: list[str]) -> dict[str, str]:
        """Map user ids to full name, falling back to e-mail."""
        if not user_ids:
            return {}
        placeholders = ", ".join("?" for _ in user_ids)
        rows = self._query(
            f"SELECT user_id, full_name, email FROM profiles WHERE user_id IN ({placeholders})",
            list(user_ids),
        )
        return {r["user_id"]: r["full_name"] or r["email"] for r in rows}

    def grant_user_role(self, user_id: str, role: UserRole) -> None:
        self._execute(
            "INSERT INTO user_roles (user_id, role) VALUES (?, ?) ON CONFLICT DO NOTHING",
            [user_id, role.value],
        )

    def get_user_roles(self, user_id: str) -> set[UserRole]:
        rows = self._query("SELECT role FROM user_roles WHERE user_id = ?", [user_id])
        roles = set()
        for row in rows:
            try:
                roles.add(UserRole(row["role"]))
            except ValueError:
                logger.warning(f"Ignoring unknown user role {row['role']!r} for {user_id}")
        return roles

    # ------------------------------------------------------------------
    # Teams and memberships
    # ------------------------------------------------------------------

    def create_team(
        self,
        name: str,
        leader_id: str,
        leader_role: str,
        name_ar: str | None = None,
        description: str | None = None,
        check: Callable[[], None] | None = None,
    ) -> str:
        """Insert a team and its leader as the first member.

        Args:
            check: Called under the write lock before anything is inserted;
                raising from it aborts the insert

        Returns:
            The new team id
        """
        team_id = _new_id()
        now = _now()
        with self._transaction() as cur:
            if check is not None:
                check()
            cur.execute(
                """
                INSERT INTO teams (id, name, name_ar, description, leader_id, max_members,
                                   status, preparation_status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    team_id, name, name_ar, description, leader_id,
                    self._default_max_members, TeamStatus.PENDING.value,
                    PreparationStatus.NOT_STARTED.value, now, now,
                ],
            )
            cur.execute(
                """
                INSERT INTO team_members (id, team_id, user_id, team_role, joined_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                [_new_id(), team_id, leader_id, leader_role, now],
            )
        logger.info(f"Created team {team_id} ({name}) led by {leader_id}")
        return team_id

    def get_memberships(self, team_id: str) -> list[Membership]:
        """Current memberships of a team, as consumed by the composition validator."""
        rows = self._query(
            "SELECT user_id, team_role FROM team_members WHERE team_id = ?",
            [team_id],
        )
        return [Membership(member_id=r["user_id"], role=r["team_role"]) for r in rows]

    def get_team_members(self, team_id: str) -> list[TeamMember]:
        """Members with profile names, ordered by canonical role."""
        rows = self._query(
            """
            SELECT m.user_id, m.team_role, p.full_name, p.email
            FROM team_members m
            LEFT JOIN profiles p ON m.user_id = p.user_id
            WHERE m.team_id = ?
            ORDER BY m.joined_at
            """,
            [team_id],
        )
        return [TeamMember(**r) for r in sort_by_role(rows)]

    def _team_from_row(self, row: dict, members: list[TeamMember]) -> Team:
        leader_name = None
        if row.get("leader_id"):
            leader_name = self.get_display_names([row["leader_id"]]).get(row["leader_id"])
        return Team(
            id=row["id"],
            name=row["name"],
            name_ar=row.get("name_ar"),
            description=row.get("description"),
            leader_id=row.get("leader_id"),
            max_members=int(row["max_members"] or self._default_max_members),
            status=parse_team_status(row.get("status")),
            preparation_status=PreparationStatus(
                row.get("preparation_status") or PreparationStatus.NOT_STARTED.value
            ),
            created_at=row.get("created_at"),
            submitted_at=row.get("submitted_at"),
            members=members,
            leader_name=leader_name,
        )

    def get_team(self, team_id: str) -> Team | None:
        results = self._query("SELECT * FROM teams WHERE id = ?", [team_id])
        if not results:
            return None
        return self._team_from_row(results[0], self.get_team_members(team_id))

    def list_teams(self, status: TeamStatus | None = None) -> list[Team]:
        """All teams, newest first, optionally filtered by stored status."""
        if status is None:
            rows = self._query("SELECT * FROM teams ORDER BY created_at DESC")
        else:
            rows = self._query(
                "SELECT * FROM teams WHERE status = ? ORDER BY created_at DESC",
                [status.value],
            )
        return [self._team_from_row(row, self.get_team_members(row["id"])) for row in rows]

    def get_team_id_for_user(self, user_id: str) -> str | None:
        results = self._query("SELECT team_id FROM team_members WHERE user_id = ?", [user_id])
        return results[0]["team_id"] if results else None

    def add_member(self, team_id: str, user_id: str, team_role: str) -> None:
        self._execute(
            """
            INSERT INTO team_members (id, team_id, user_id, team_role, joined_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [_new_id(), team_id, user_id, team_role, _now()],
        )

    def update_member_role(
        self,
        team_id: str,
        user_id: str,
        team_role: str,
        check: Callable[[list[Membership]], None] | None = None,
    ) -> None:
        """Change a member's role; ``check`` sees the roster as read under the write lock."""
        with self._transaction() as cur:
            if check is not None:
                check(self._read_memberships(cur, team_id))
            cur.execute(
                "UPDATE team_members SET team_role = ? WHERE team_id = ? AND user_id = ?",
                [team_role, team_id, user_id],
            )

    def remove_member(self, team_id: str, user_id: str) -> None:
        self._execute(
            "DELETE FROM team_members WHERE team_id = ? AND user_id = ?",
            [team_id, user_id],
        )

    def set_team_status(self, team_id: str, status: TeamStatus, submitted: bool = False) -> None:
        now = _now()
        if submitted:
            self._execute(
                "UPDATE teams SET status = ?, submitted_at = ?, updated_at = ? WHERE id = ?",
                [status.value, now, now, team_id],
            )
        else:
            self._execute(
                "UPDATE teams SET status = ?, updated_at = ? WHERE id = ?",
                [status.value, now, team_id],
            )

    def set_preparation_status(self, team_id: str, status: PreparationStatus) -> None:
        self._execute(
            "UPDATE teams SET preparation_status = ?, updated_at = ? WHERE id = ?",
            [status.value, _now(), team_id],
        )

    def count_teams(self, status: TeamStatus | None = None) -> int:
        if status is None:
            rows = self._query("SELECT COUNT(*) AS n FROM teams")
        else:
            rows = self._query("SELECT COUNT(*) AS n FROM teams WHERE status = ?", [status.value])
        return int(rows[0]["n"]) if rows else 0

    # ------------------------------------------------------------------
    # Join requests
    # ------------------------------------------------------------------

    def _join_request_from_row(self, row: dict) -> JoinRequest:
        # Older requests only carry the role inside the message
        role = row.get("team_role") or role_from_message(row.get("message"))
        return JoinRequest(
            id=row["id"],
            team_id=row["team_id"],
            user_id=row["user_id"],
            requested_role=role,
            status=JoinRequestStatus(row.get("status") or JoinRequestStatus.PENDING.value),
            message=row.get("message"),
            created_at=row.get("created_at"),
            user_name=row.get("full_name") or row.get("email"),
            user_email=row.get("email"),
        )

    def create_join_request(
        self, team_id: str, user_id: str, team_role: str, message: str | None = None
    ) -> str:
        request_id = _new_id()
        now = _now()
        self._execute(
            """
            INSERT INTO join_requests (id, team_id, user_id, team_role, message, status,
                                       created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [request_id, team_id, user_id, team_role, message,
             JoinRequestStatus.PENDING.value, now, now],
        )
        return request_id

    def get_join_request(self, request_id: str) -> JoinRequest | None:
        results = self._query(
            """
            SELECT r.*, p.full_name, p.email
            FROM join_requests r
            LEFT JOIN profiles p ON r.user_id = p.user_id
            WHERE r.id = ?
            """,
            [request_id],
        )
        return self._join_request_from_row(results[0]) if results else None

    def find_join_request(self, team_id: str, user_id: str) -> JoinRequest | None:
        results = self._query(
            "SELECT * FROM join_requests WHERE team_id = ? AND user_id = ?",
            [team_id, user_id],
        )
        return self._join_request_from_row(results[0]) if results else None

    def list_join_requests(
        self, team_id: str, status: JoinRequestStatus | None = JoinRequestStatus.PENDING
    ) -> list[JoinRequest]:
        """Requests for a team, newest first. Pending only by default."""
        sql = """
            SELECT r.*, p.full_name, p.email
            FROM join_requests r
            LEFT JOIN profiles p ON r.user_id = p.user_id
            WHERE r.team_id = ?
        """
        params: list = [team_id]
        if status is not None:
            sql += " AND r.status = ?"
            params.append(status.value)
        sql += " ORDER BY r.created_at DESC"
        return [self._join_request_from_row(r) for r in self._query(sql, params)]

    def set_join_request_status(self, request_id: str, status: JoinRequestStatus) -> None:
        self._execute(
            "UPDATE join_requests SET status = ?, updated_at = ? WHERE id = ?",
            [status.value, _now(), request_id],
        )

    def approve_join_request(
        self,
        request: JoinRequest,
        team_role: str,
        check: Callable[[list[Membership]], None] | None = None,
    ) -> None:
        """Mark a request approved and add the requester in one transaction.

        ``check`` receives the team's memberships read under the write lock,
        so concurrent approvals are validated one after another.
        """
        now = _now()
        with self._transaction() as cur:
            if check is not None:
                check(self._read_memberships(cur, request.team_id))
            cur.execute(
                "UPDATE join_requests SET status = ?, updated_at = ? WHERE id = ?",
                [JoinRequestStatus.APPROVED.value, now, request.id],
            )
            cur.execute(
                """
                INSERT INTO team_members (id, team_id, user_id, team_role, joined_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                [_new_id(), request.team_id, request.user_id, team_role, now],
            )

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def upsert_score(
        self, team_id: str, judge_id: str, criteria: ScoreCriteria, comments: str | None = None
    ) -> None:
        """One score per (team, judge); a second submission replaces the first."""
        now = _now()
        self._execute(
            """
            INSERT INTO scores (id, team_id, judge_id, criteria, total_score, comments,
                                created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (team_id, judge_id) DO UPDATE SET
                criteria = excluded.criteria,
                total_score = excluded.total_score,
                comments = excluded.comments,
                updated_at = excluded.updated_at
            """,
            [_new_id(), team_id, judge_id, json.dumps(criteria.to_dict()),
             criteria.total, comments, now, now],
        )

    def list_scores(self, team_id: str | None = None) -> list[Score]:
        """Scores with team and judge names, newest first."""
        sql = """
            SELECT s.*, t.name AS team_name, COALESCE(p.full_name, p.email) AS judge_name
            FROM scores s
            LEFT JOIN teams t ON s.team_id = t.id
            LEFT JOIN profiles p ON s.judge_id = p.user_id
        """
        params: list = []
        if team_id is not None:
            sql += " WHERE s.team_id = ?"
            params.append(team_id)
        sql += " ORDER BY s.created_at DESC"

        return [
            Score(
                id=row["id"],
                team_id=row["team_id"],
                judge_id=row["judge_id"],
                criteria=ScoreCriteria.from_dict(json.loads(row["criteria"])),
                comments=row.get("comments"),
                created_at=row.get("created_at"),
                updated_at=row.get("updated_at"),
                team_name=row.get("team_name") or "Unknown Team",
                judge_name=row.get("judge_name") or "Unknown Judge",
            )
            for row in self._query(sql, params)
        ]

    # ------------------------------------------------------------------
    # System settings
    # ------------------------------------------------------------------

    def get_setting(self, key: str) -> dict | None:
        results = self._query("SELECT value FROM system_settings WHERE key = ?", [key])
        return json.loads(results[0]["value"]) if results else None

    def save_setting(self, key: str, value: dict, updated_by: str | None = None) -> None:
        self._execute(
            """
            INSERT INTO system_settings (key, value, updated_at, updated_by)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at,
                updated_by = excluded.updated_by
            """,
            [key, json.dumps(value), _now(), updated_by],
        )
