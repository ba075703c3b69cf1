# routers/users.py

from fastapi import APIRouter, Depends

from dependencies.auth import get_current_user, CurrentUser
from core.subscription_helpers import has_active_subscription
from models.user import UserProfileUpdate
from services.users import ensure_user_record, update_profile

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


def _user_payload(record: dict) -> dict:
    return {
        "user": record,
        "has_active_subscription": has_active_subscription(record),
    }


# -----------------------------------------------------
# POST /users/session
# Called by the front end after sign-in. Creates the user record (and
# its trial window) on first sign-in.
# -----------------------------------------------------
@router.post("/session")
def user_session(current_user: CurrentUser = Depends(get_current_user)):
    return _user_payload(ensure_user_record(current_user.id, current_user.email, current_user.name))


# -----------------------------------------------------
# GET / PATCH /users/profile
# Any signed-in user, bound to a company or not.
# -----------------------------------------------------
@router.get("/profile")
def get_profile(current_user: CurrentUser = Depends(get_current_user)):
    return _user_payload(ensure_user_record(current_user.id, current_user.email, current_user.name))


@router.patch("/profile")
def patch_profile(
    payload: UserProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    record = update_profile(current_user.id, current_user.email, payload.display_name)
    return {"success": True, **_user_payload(record)}
