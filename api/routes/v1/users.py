"""
api/routes/v1/users.py -- User administration routes.

Routes:
  GET    /users?page=N     -- paginated user list
  POST   /users            -- create a user with a password and role
  GET    /users/{user_id}  -- user detail with role
  PUT    /users/{user_id}  -- update profile fields and/or role
  DELETE /users/{user_id}  -- delete a user

Every handler is gated on the "users" resource. The gate is named in each
signature so the protection is visible at the handler, not hidden in the
router.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.exc import IntegrityError

from api.models import ErrorDetail, PageResponse, UserCreate, UserResponse, UserUpdate
from auth.dependencies import require_permission
from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore
from core.pagination import paginate

router = APIRouter()

_RESOURCE = "users"


def _not_found(user_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="user_not_found", message=f"User {user_id} not found.").model_dump(),
    )


def _require_role(user_store: UserStore, role_id: int) -> None:
    if user_store.get_role(role_id) is None:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="unknown_role", message=f"Role {role_id} does not exist.").model_dump(),
        )


def _conflict(exc: IntegrityError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=ErrorDetail(code="conflict", message="A user with that email already exists.").model_dump(),
    )


@router.get("/users", response_model=PageResponse[UserResponse])
def list_users(
    request: Request,
    page: int = 1,
    current_user: User = Depends(require_permission(_RESOURCE)),
) -> PageResponse[UserResponse]:
    """Return one page of users, oldest first."""
    user_store: UserStore = request.app.state.user_store
    return PageResponse[UserResponse].from_result(paginate(user_store, page), UserResponse.from_user)


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(
    request: Request,
    body: UserCreate,
    current_user: User = Depends(require_permission(_RESOURCE)),
) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    _require_role(user_store, body.role_id)
    new_user = User(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        role_id=body.role_id,
        hashed_password=hash_password(body.password),
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        raise _conflict(exc) from exc
    return UserResponse.from_user(user_store.get_by_id(user_id))


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    request: Request,
    user_id: int,
    current_user: User = Depends(require_permission(_RESOURCE)),
) -> UserResponse:
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        raise _not_found(user_id)
    return UserResponse.from_user(user)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    request: Request,
    user_id: int,
    body: UserUpdate,
    current_user: User = Depends(require_permission(_RESOURCE)),
) -> UserResponse:
    """Update any subset of first_name, last_name, email and role_id."""
    user_store: UserStore = request.app.state.user_store
    updates = body.model_dump(exclude_none=True)
    if "role_id" in updates:
        _require_role(user_store, updates["role_id"])
    try:
        found = user_store.update_user(user_id, **updates)
    except IntegrityError as exc:
        raise _conflict(exc) from exc
    if not found:
        raise _not_found(user_id)
    return UserResponse.from_user(user_store.get_by_id(user_id))


@router.delete("/users/{user_id}", status_code=204)
def delete_user(
    request: Request,
    user_id: int,
    current_user: User = Depends(require_permission(_RESOURCE)),
) -> Response:
    """Delete a user. Admins cannot delete their own account."""
    if user_id == current_user.id:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="self_delete", message="You cannot delete your own account.").model_dump(),
        )
    user_store: UserStore = request.app.state.user_store
    if not user_store.delete_user(user_id):
        raise _not_found(user_id)
    return Response(status_code=204)
