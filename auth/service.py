from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Header
from jose import JWTError, ExpiredSignatureError, jwt
from passlib.context import CryptContext

from config.settings import SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES
from users.models import CurrentUser

# =========================
# JWT / SECURITY CONFIG
# =========================

ALGORITHM = "HS256"

# Password hashing setup
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


# =========================
# PASSWORD HELPERS
# =========================

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


# =========================
# TOKEN CREATION
# =========================

def create_access_token(data: dict) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


# =========================
# TOKEN VERIFICATION (HEADER OR QUERY)
# =========================

def verify_token(
    authorization: str = Header(None),
    token: str = None
):
    """
    Verify JWT token from Authorization header (Bearer <token>)
    or from a 'token' query parameter (preview pages and PDF links
    opened directly in the browser).
    Returns the decoded payload if valid.
    """
    if authorization:
        try:
            scheme, token_value = authorization.split()
        except ValueError:
            raise HTTPException(
                status_code=401,
                detail="Invalid authorization header format"
            )
        if scheme.lower() != "bearer":
            raise HTTPException(
                status_code=401,
                detail="Invalid authorization scheme"
            )
        token = token_value
    elif not token:
        raise HTTPException(
            status_code=401,
            detail="Missing authorization token"
        )

    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=401,
            detail="Token expired"
        )
    except JWTError:
        raise HTTPException(
            status_code=401,
            detail="Invalid token"
        )


# =========================
# CURRENT USER
# =========================

def get_current_user(payload: dict = Depends(verify_token)) -> CurrentUser:
    """
    Resolve the token to the account it belongs to.
    This is the only place the current user comes from; routes receive it
    as a parameter and hand it down explicitly.
    """
    from users import service as users_service

    user_id = payload.get("user_id")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        user = users_service.get_user_by_id(user_id)
    except HTTPException as e:
        if e.status_code == 404:
            raise HTTPException(status_code=401, detail="Account not found")
        raise

    if not user.get("is_active", True):
        raise HTTPException(status_code=401, detail="Account is disabled")

    return CurrentUser(
        id=user["id"],
        email=user["email"],
        company_profile=user.get("company_profile") or {},
    )
