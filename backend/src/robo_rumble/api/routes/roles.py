"""REST endpoints exposing the role table and the composition validator."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from robo_rumble.models.roles import MAX_TEAM_SIZE, MIN_TEAM_SIZE, ROLE_RULES, Membership
from robo_rumble.services.composition_validator import evaluate_composition
from robo_rumble.services.role_admission import available_roles, can_add_role

router = APIRouter(prefix="/api/roles", tags=["roles"])


class MembershipIn(BaseModel):
    member_id: str
    role: str | None = None


class CompositionRequest(BaseModel):
    memberships: list[MembershipIn] = Field(default_factory=list)


class AdmissionRequest(CompositionRequest):
    role: str


def _memberships(body: CompositionRequest) -> list[Membership]:
    return [Membership(member_id=m.member_id, role=m.role) for m in body.memberships]


@router.get("")
def list_roles():
    """Role caps and team size bounds."""
    return {
        "roles": [
            {"role": rule.role.value, "cap": rule.cap, "required": rule.required}
            for rule in ROLE_RULES.values()
        ],
        "min_team_size": MIN_TEAM_SIZE,
        "max_team_size": MAX_TEAM_SIZE,
    }


@router.post("/validate")
def validate_composition(body: CompositionRequest):
    """Classify an arbitrary membership set without touching stored teams."""
    return evaluate_composition(_memberships(body)).to_dict()


@router.post("/admission")
def check_admission(body: AdmissionRequest):
    """Whether one more member with ``role`` could join the given memberships."""
    memberships = _memberships(body)
    check = can_add_role(memberships, body.role)
    return {
        "is_valid": check.is_valid,
        "error": check.error,
        "message": check.message,
        "available_roles": [role.value for role in available_roles(memberships)],
    }
