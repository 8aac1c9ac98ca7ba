import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError
from datetime import timedelta
from taskboard.dependencies import get_db, get_current_user
from taskboard.errors import validation_error
from taskboard.models.user import User as UserModel
from taskboard.schemas.common import ApiResponse
from taskboard.schemas.user import Token, UserCreate, UserResponse
from taskboard.utils.security import get_password_hash, verify_password, create_access_token
from taskboard.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    new_user = UserModel(
        name=user.name,
        email=user.email.lower(),
        hashed_password=get_password_hash(user.password),
    )
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise validation_error({"email": "The email has already been taken."})
    await db.refresh(new_user)
    logger.info("Registered user %s", new_user.id)
    return {"data": new_user, "message": "User registered successfully"}

@router.post("/token", response_model=Token)
async def login_for_access_token(
    db: AsyncSession = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
):
    result = await db.execute(select(UserModel).filter(UserModel.email == form_data.username.lower()))
    user = result.scalars().first()

    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": str(user.id)}, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}

@router.get("/user", response_model=UserResponse)
async def get_me(current_user: UserModel = Depends(get_current_user)):
    return current_user
