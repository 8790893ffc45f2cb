"""Pydantic schemas for user profile and admin listing."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserOut(BaseModel):
	id: str
	name: Optional[str] = None
	email: Optional[str] = None
	image: Optional[str] = None
	is_admin: bool = False
	onboarding_completed: bool = False
	created_at: Optional[datetime] = None
	solved_count: int = 0


class ProfileUpdateRequest(BaseModel):
	# validated by service.validate_username
	name: Optional[str] = None
	image: Optional[str] = Field(default=None, max_length=2048)
	onboarding_completed: Optional[bool] = None


class OnboardingStatus(BaseModel):
	onboarding_completed: bool = False
