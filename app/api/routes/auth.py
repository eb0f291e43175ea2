from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user, require_capability, require_db
from app.core.policy import Capability
from app.cqrs.commands import users as users_commands
from app.cqrs.queries import users as users_queries
from app.models.schemas import LoginRequest, LoginResponse, UserOut, UserRegister

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest):
    require_db()
    return users_queries.login_user(payload)


@router.post(
    "/register",
    response_model=UserOut,
    status_code=201,
    dependencies=[Depends(require_capability(Capability.USERS_MANAGE))],
)
def register(payload: UserRegister):
    require_db()
    return users_commands.register_user(payload)


@router.get("/profile", response_model=UserOut)
def profile(user: dict = Depends(get_current_user)):
    return user
