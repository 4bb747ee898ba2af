"""
Staff account service: creation, credential checks and the bootstrap admin
"""

from datetime import datetime
from typing import Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.auth_handler import AuthHandler
from app.models.user import User
from app.schemas.user import UserCreate, UserLogin
from app.utils.error_handler import StoreError, commit_or_raise

logger = logging.getLogger(__name__)

class UserService:
    """Staff account operations over one database session"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    def _find_by_username(self, username: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.username == username.strip().lower()).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up staff account '{username}': {e}")
            raise StoreError("Failed to look up staff account", e)

    async def create_user(self, user_data: UserCreate) -> User:
        """Add a staff or admin account; usernames are unique case-insensitively"""
        if self._find_by_username(user_data.username):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username already registered"
            )

        account = User(
            username=user_data.username.lower(),
            hashed_password=self.auth_handler.get_password_hash(user_data.password),
            full_name=user_data.full_name,
            role=user_data.role or "staff",
            is_active=True,
        )
        self.db.add(account)
        commit_or_raise(self.db, "create staff account")
        self.db.refresh(account)

        logger.info(f"Created {account.role} account: {account.username}")
        return account

    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        """The matching active account, or None for bad credentials"""
        account = self._find_by_username(login_data.username)
        if account is None:
            logger.warning(f"Login attempt for unknown account: {login_data.username}")
            return None

        if not self.auth_handler.verify_password(login_data.password, account.hashed_password):
            logger.warning(f"Wrong password for account: {account.username}")
            return None

        if not account.is_active:
            logger.warning(f"Login attempt on deactivated account: {account.username}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated"
            )

        account.last_login = datetime.utcnow()
        commit_or_raise(self.db, "record login")
        logger.info(f"Staff login: {account.username}")
        return account

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load staff account {user_id}: {e}")
            raise StoreError("Failed to load staff account", e)

    async def ensure_admin(self, username: str, password: str) -> Optional[User]:
        """Create the bootstrap admin account if it does not exist yet"""
        if self._find_by_username(username):
            return None
        admin = await self.create_user(UserCreate(
            username=username,
            password=password,
            full_name="Administrator",
            role="admin",
        ))
        logger.info(f"Bootstrap admin account created: {admin.username}")
        return admin
