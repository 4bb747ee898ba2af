"""
Staff authentication: bcrypt password hashes and signed bearer tokens
Every dashboard and status endpoint resolves the caller through here
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import ACCESS_TOKEN_EXPIRE_MINUTES, BCRYPT_ROUNDS, SECRET_KEY

ALGORITHM = "HS256"
STAFF_ROLES = ("staff", "admin")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)
security = HTTPBearer()

@dataclass(frozen=True)
class StaffPrincipal:
    """The authenticated caller as carried in the token claims"""
    user_id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

class AuthHandler:
    """Password hashing and token issuance for staff accounts"""

    def __init__(self, expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES):
        self.pwd_context = pwd_context
        self.expire_minutes = expire_minutes

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def issue_token(self, user, expires_delta: Optional[timedelta] = None) -> str:
        """Signed token naming the user and their role"""
        lifetime = expires_delta or timedelta(minutes=self.expire_minutes)
        claims = {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role,
            "exp": datetime.utcnow() + lifetime,
        }
        return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)

    def read_token(self, token: str) -> StaffPrincipal:
        """Decode a bearer token into the caller it was issued to"""
        try:
            claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            raise _credentials_error()

        subject = claims.get("sub")
        role = claims.get("role")
        if subject is None or role not in STAFF_ROLES:
            raise _credentials_error()
        try:
            user_id = int(subject)
        except (TypeError, ValueError):
            raise _credentials_error()

        return StaffPrincipal(user_id=user_id, username=claims.get("username", ""), role=role)

auth_handler = AuthHandler()

def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> StaffPrincipal:
    """Dependency resolving the bearer token to a StaffPrincipal"""
    return auth_handler.read_token(credentials.credentials)

class RoleChecker:
    """Dependency allowing only the given roles through"""

    def __init__(self, allowed_roles: Iterable[str]):
        self.allowed_roles = tuple(allowed_roles)

    def __call__(self, user: StaffPrincipal = Depends(get_current_user)) -> StaffPrincipal:
        if user.role not in self.allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Operation not permitted"
            )
        return user

admin_required = RoleChecker(["admin"])
staff_required = RoleChecker(STAFF_ROLES)
