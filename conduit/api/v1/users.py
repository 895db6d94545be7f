"""
User account endpoints: registration, login and the current user.
"""

from fastapi import APIRouter, status

from conduit.api.deps import CurrentPrincipal, DbSession
from conduit.kernel.identity.identity_service import AuthenticatedUser, IdentityService
from conduit.schemas.user import LoginUserBody, NewUserBody, UpdateUserBody, UserBody, UserWithToken

router = APIRouter()


def _user_body(result: AuthenticatedUser) -> UserBody:
    user = result.user
    return UserBody(user=UserWithToken(
        email=user.email,
        token=result.token,
        username=user.username,
        bio=user.bio,
        image=user.image,
    ))


@router.post("/users", response_model=UserBody, status_code=status.HTTP_201_CREATED)
async def register(data: NewUserBody, db: DbSession):
    """
    Register a new user account.

    Returns the user with a token, so registering also logs in.
    """
    result = await IdentityService(db).register_user(
        username=data.user.username,
        email=data.user.email,
        password=data.user.password,
    )
    return _user_body(result)


@router.post("/users/login", response_model=UserBody)
async def login(data: LoginUserBody, db: DbSession):
    """Authenticate with email and password."""
    result = await IdentityService(db).login(
        email=data.user.email,
        password=data.user.password,
    )
    return _user_body(result)


@router.get("/user", response_model=UserBody)
async def get_current_user(principal: CurrentPrincipal, db: DbSession):
    """Get the current user with a renewed token."""
    return _user_body(await IdentityService(db).current_user(principal))


@router.put("/user", response_model=UserBody)
async def update_current_user(data: UpdateUserBody, principal: CurrentPrincipal, db: DbSession):
    """Update the current user; omitted fields are left unchanged."""
    changes = data.user
    result = await IdentityService(db).update_user(
        principal,
        username=changes.username,
        email=changes.email,
        password=changes.password,
        bio=changes.bio,
        image=changes.image,
    )
    return _user_body(result)
