"""
Pydantic schemas for staff accounts
"""

from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
import re

class UserCreate(BaseModel):
    """Schema for creating a staff account (admin only)"""
    username: str = Field(..., min_length=3, max_length=50, description="Username (3-50 characters)")
    full_name: Optional[str] = Field(None, max_length=100, description="Display name")
    password: str = Field(..., min_length=8, max_length=72, description="Password (minimum 8 characters)")
    role: Optional[str] = Field("staff", description="User role")

    @validator('username')
    def validate_username(cls, v):
        if not re.match(r'^[a-zA-Z0-9_.-]+$', v):
            raise ValueError('Username can only contain letters, numbers, dots, underscores, and hyphens')
        return v.lower()

    @validator('password')
    def validate_password(cls, v):
        if not re.search(r'[A-Za-z]', v) or not re.search(r'\d', v):
            raise ValueError('Password must contain at least one letter and one digit')
        return v

    @validator('role')
    def validate_role(cls, v):
        allowed_roles = ['staff', 'admin']
        if v not in allowed_roles:
            raise ValueError(f'Role must be one of: {", ".join(allowed_roles)}')
        return v

class UserLogin(BaseModel):
    """Schema for staff login"""
    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")

    @validator('username')
    def validate_username(cls, v):
        v = v.strip().lower()
        if not v:
            raise ValueError('Username is required')
        return v

class UserResponse(BaseModel):
    """Schema for user responses (excludes the password hash)"""
    id: int
    username: str
    full_name: Optional[str]
    role: str
    is_active: bool
    last_login: Optional[datetime]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    """Schema for authentication token response"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
