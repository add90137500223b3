from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from app.config import security_config

# OAuth2配置
SECRET_KEY = security_config.get("secret_key", "change-me")
ALGORITHM = security_config.get("algorithm", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(security_config.get("access_token_expire_minutes", 720))

# 令牌由外部认证服务签发, 这里只做校验
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_user(
        token: Optional[str] = Depends(oauth2_scheme)
) -> dict:
    """
    获取当前用户信息
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token:
        raise credentials_exception

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_code: str = payload.get("sub")

        if user_code is None:
            raise credentials_exception

    except JWTError:
        raise credentials_exception

    return {"user_code": user_code}
