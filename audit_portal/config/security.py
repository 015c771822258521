"""
JWT / 비밀번호 보안 설정
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from audit_portal.config.settings import (
    SECRET_KEY,
    ALGORITHM,
    ACCESS_TOKEN_EXPIRE_MINUTES,
    BCRYPT_ROUNDS,
)

# 비밀번호 해싱 설정
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)

# 비밀번호 정책: 8자 이상, 소문자/대문자/숫자/특수문자(@$!%*?&) 각 1개 이상
PASSWORD_MIN_LENGTH = 8
_PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$"
)


def hash_password(password: str) -> str:
    """비밀번호를 bcrypt로 해싱"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """입력한 비밀번호와 저장된 해시 비교"""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """사용자가 없을 때도 해시 비교와 같은 시간을 소모"""
    pwd_context.dummy_verify()


def check_password_strength(password: str) -> Optional[str]:
    """
    비밀번호 정책 검사

    Returns:
        위반 시 오류 메시지, 통과 시 None
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        return "Нууц үг хамгийн багадаа 8 тэмдэгт байх ёстой"
    if not _PASSWORD_PATTERN.match(password):
        return "Нууц үг нь том үсэг, жижиг үсэг, тоо, тусгай тэмдэгт агуулсан байх ёстой"
    return None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Access Token 생성"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def verify_token(token: str) -> Optional[dict]:
    """Token 검증 및 payload 반환"""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None
