"""REST endpoints for participant profiles."""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from robo_rumble.api.deps import CurrentUser
from robo_rumble.utils.validation import validate_password, validate_saudi_phone

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


class ProfileRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    full_name: str | None = Field(default=None, max_length=200)
    phone: str | None = None
    university: str | None = None


class PasswordCheckRequest(BaseModel):
    password: str


@router.put("/me")
def upsert_my_profile(request: Request, body: ProfileRequest, user_id: CurrentUser):
    """Create or update the caller's profile. Phone numbers are normalized."""
    phone = None
    if body.phone:
        result = validate_saudi_phone(body.phone)
        if not result.is_valid:
            raise HTTPException(
                status_code=422,
                detail={"code": "invalid_phone", "message": "Phone must be 05XXXXXXXX or +9665XXXXXXXX"},
            )
        phone = result.formatted

    repo = request.app.state.repository
    return repo.upsert_profile(
        user_id=user_id,
        email=body.email.strip(),
        full_name=body.full_name,
        phone=phone,
        university=body.university,
    )


@router.get("/me")
def get_my_profile(request: Request, user_id: CurrentUser):
    profile = request.app.state.repository.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.post("/password-check")
def check_password(body: PasswordCheckRequest):
    """Report which password rules are met, for live form feedback."""
    result = validate_password(body.password)
    return {**asdict(result), "is_valid": result.is_valid}
