from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.auth import EDITOR_ONLY, REGISTERED, Actor
from newsdesk.database import get_db
from newsdesk.schemas import (
    AvailabilityCheck,
    BiographyUpdate,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserProfile,
)
from newsdesk.services import user_service

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    return await user_service.register_user(db, data)


@router.post("/login")
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    return await user_service.login(db, data.email, data.password)


@router.post("/check-username-email")
async def check_username_email(data: AvailabilityCheck, db: AsyncSession = Depends(get_db)):
    return await user_service.check_availability(db, data.username, data.email)


@router.get("/user-profile", response_model=UserProfile)
async def get_profile(
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    profile = await user_service.get_profile(db, actor.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.put("/user-profile")
async def update_profile(
    data: ProfileUpdate,
    actor: Actor = Depends(REGISTERED),
    db: AsyncSession = Depends(get_db),
):
    profile = await user_service.update_profile(db, actor.id, data)
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "Profile updated successfully", "profile": profile}


@router.put("/editor/biography")
async def update_biography(
    data: BiographyUpdate,
    actor: Actor = Depends(EDITOR_ONLY),
    db: AsyncSession = Depends(get_db),
):
    await user_service.update_biography(db, actor.id, data.biography)
    return {"message": "Biography updated"}
