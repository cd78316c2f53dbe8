import logging

from fastapi import APIRouter, Depends, HTTPException

from product_api.api.deps import get_user_store
from product_api.core.errors import UserAlreadyExists
from product_api.schemas.user import CreateUserInput, UserOut
from product_api.services.users import UserStore

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger("papi.auth")


@router.post("", response_model=UserOut)
def create_user(body: CreateUserInput, users: UserStore = Depends(get_user_store)) -> UserOut:
    """Register a user. The password hash never leaves the service."""
    try:
        user = users.create(email=body.email, name=body.name, password=body.password)
    except UserAlreadyExists as e:
        logger.warning("register_conflict")
        raise HTTPException(status_code=409, detail=str(e))
    return UserOut.model_validate(user)
