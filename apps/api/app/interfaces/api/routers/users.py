from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.application.user_service import UserService
from app.container import get_user_service
from app.interfaces.api.schemas import ResponseEnvelope, UserCreate, UserLogin, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=ResponseEnvelope)
async def create_user(
    payload: UserCreate, service: UserService = Depends(get_user_service)
) -> ResponseEnvelope:
    return await service.create(payload)


@router.post("/login", response_model=ResponseEnvelope)
async def login(
    payload: UserLogin, service: UserService = Depends(get_user_service)
) -> ResponseEnvelope:
    return await service.login(payload)


@router.get("", response_model=ResponseEnvelope)
async def list_users(service: UserService = Depends(get_user_service)) -> ResponseEnvelope:
    return await service.get_all_users()


@router.get("/{user_id}", response_class=PlainTextResponse)
def find_user(user_id: int, service: UserService = Depends(get_user_service)) -> str:
    return service.find_one(user_id)


@router.patch("/{user_id}", response_class=PlainTextResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    service: UserService = Depends(get_user_service),
) -> str:
    return service.update(user_id, payload)


@router.delete("/{user_id}", response_class=PlainTextResponse)
def remove_user(user_id: int, service: UserService = Depends(get_user_service)) -> str:
    return service.remove(user_id)
