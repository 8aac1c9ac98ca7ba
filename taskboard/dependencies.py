from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from jose import JWTError, jwt
from taskboard.database import get_db as db_session
from taskboard.config import settings
from taskboard.models.user import User as UserModel
from taskboard.schemas.user import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

def get_db(db: AsyncSession = Depends(db_session)):
    return db

async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        token_data = TokenData(user_id=int(subject))
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(UserModel).filter(UserModel.id == token_data.user_id))
    user = result.scalars().first()
    if user is None:
        raise credentials_exception
    return user


async def get_actor_id(current_user: UserModel = Depends(get_current_user)) -> int:
    """The authenticated user's id, handed explicitly to every service call."""
    return current_user.id
