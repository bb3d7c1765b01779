"""
api/routes/v1/roles.py -- Read-only role endpoints, gated on "roles".

Roles are created by the startup seed or `python main.py seed-roles`; the API
only lists them so admin clients can fill a role picker.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import ErrorDetail, RoleResponse
from auth.dependencies import require_permission
from auth.models import User
from auth.store import UserStore

router = APIRouter()


@router.get("/roles", response_model=list[RoleResponse])
def list_roles(
    request: Request,
    current_user: User = Depends(require_permission("roles")),
) -> list[RoleResponse]:
    user_store: UserStore = request.app.state.user_store
    return [RoleResponse.from_role(r) for r in user_store.list_roles()]


@router.get("/roles/{role_id}", response_model=RoleResponse)
def get_role(
    request: Request,
    role_id: int,
    current_user: User = Depends(require_permission("roles")),
) -> RoleResponse:
    user_store: UserStore = request.app.state.user_store
    role = user_store.get_role(role_id)
    if role is None:
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(code="role_not_found", message=f"Role {role_id} not found.").model_dump(),
        )
    return RoleResponse.from_role(role)
