from fastapi import APIRouter, Depends

from .models import CompanyProfile, CurrentUser, UserPasswordUpdate
from . import service
from auth.service import get_current_user

router = APIRouter(prefix='/users', tags=['users'])


@router.get('/me/profile', response_model=CompanyProfile)
def get_profile(current_user: CurrentUser = Depends(get_current_user)):
    """Company profile used to seed new invoices"""
    return current_user.company_profile


@router.put('/me/profile', response_model=CompanyProfile)
def update_profile(profile: CompanyProfile, current_user: CurrentUser = Depends(get_current_user)):
    """Update company profile (existing invoices are not touched)"""
    result = service.update_company_profile(current_user.id, profile)
    return CompanyProfile(**(result.get("company_profile") or {}))


@router.patch('/me/password')
def update_password(
    password_update: UserPasswordUpdate,
    current_user: CurrentUser = Depends(get_current_user)
):
    """Update password"""
    return service.update_user_password(
        current_user.id,
        password_update.current_password,
        password_update.new_password
    )
