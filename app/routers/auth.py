"""
Authentication endpoints for staff login and account management
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging

from app.config import ACCESS_TOKEN_EXPIRE_MINUTES
from app.database import get_db
from app.limiter import limiter
from app.schemas.user import UserCreate, UserLogin, UserResponse, TokenResponse
from app.services.user_service import UserService
from app.auth.auth_handler import StaffPrincipal, auth_handler, get_current_user, admin_required
from app.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")  # Prevent brute force attacks
async def login(
    request: Request,
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Exchange staff credentials for a bearer token"""
    audit = ActivityLogger(db)
    user = await UserService(db).authenticate_user(login_data)

    if not user:
        await audit.log_request(
            request,
            action="login_failed",
            status_code=401,
            username=login_data.username,
            error_message=f"Failed login attempt for: {login_data.username}"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    token = auth_handler.issue_token(user)
    await audit.log_request(request, action="login", status_code=200, username=user.username)

    return TokenResponse(
        access_token=token,
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.from_orm(user)
    )

@router.get("/me", response_model=UserResponse)
@limiter.limit("30/minute")
async def get_current_user_info(
    request: Request,
    current_user: StaffPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Account behind the presented token"""
    user = await UserService(db).get_user_by_id(current_user.user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user

@router.post("/logout")
@limiter.limit("30/minute")
async def logout(
    request: Request,
    current_user: StaffPrincipal = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Tokens are stateless; the client discards its copy"""
    await ActivityLogger(db).log_request(
        request, action="logout", status_code=200, username=current_user.username
    )
    logger.info(f"Staff user logged out: {current_user.username}")
    return {"message": "Successfully logged out"}

@router.post("/users", response_model=UserResponse, status_code=201)
@limiter.limit("10/minute")
async def create_user(
    request: Request,
    user_data: UserCreate,
    current_user: StaffPrincipal = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Create a staff or admin account (Admin only)"""
    new_user = await UserService(db).create_user(user_data)

    await ActivityLogger(db).log_request(
        request,
        action="user_created",
        status_code=201,
        username=current_user.username,
        details={"created": new_user.username, "role": new_user.role}
    )
    return new_user
