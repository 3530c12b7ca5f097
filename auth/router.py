from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from .service import (
    verify_password,
    create_access_token,
    get_current_user,
)
from users import service as users_service
from users.models import CurrentUser, UserCreate

router = APIRouter(prefix="/auth", tags=["authentication"])

# ============================
# MODELS
# ============================

class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    email: str


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


# ============================
# CORS PREFLIGHT FIX
# ============================

@router.options("/login")
def login_options():
    return {"message": "OK"}


# ============================
# LOGIN
# ============================

@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest):
    user = users_service.get_user_by_email(credentials.email)

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("is_active", True):
        raise HTTPException(status_code=401, detail="Account is disabled")

    if not verify_password(credentials.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    access_token = create_access_token({
        "sub": user["email"],
        "user_id": user["id"],
    })

    return LoginResponse(access_token=access_token, email=user["email"])


# ============================
# REGISTER
# ============================

@router.post("/register")
def register(user_data: UserCreate):
    user = users_service.create_user(
        user_data.email,
        user_data.password,
        user_data.company_profile,
    )

    return {
        "message": "User registered successfully",
        "user_id": user["id"],
        "email": user["email"],
        "access_token": create_access_token({"sub": user["email"], "user_id": user["id"]}),
        "token_type": "bearer",
    }


# ============================
# AUTHENTICATED USER INFO
# ============================

@router.get("/me", response_model=CurrentUser)
def me(user: CurrentUser = Depends(get_current_user)):
    return user


# ============================
# LOGOUT
# ============================

@router.post("/logout")
def logout(user: CurrentUser = Depends(get_current_user)):
    """Tokens are stateless; the client drops its copy and its session context."""
    return {"message": "Logged out", "email": user.email}


# ============================
# CHANGE PASSWORD
# ============================

@router.post("/change-password")
def change_password(
    data: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user)
):
    return users_service.update_user_password(user.id, data.old_password, data.new_password)
