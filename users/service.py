import logging
from typing import Optional

import psycopg2
from fastapi import HTTPException
from psycopg2.extras import Json

from database import get_db_connection
from auth.service import get_password_hash, verify_password
from .models import CompanyProfile

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, company_profile, is_active, created_at"


# ============================================================
# GET USER BY ID
# ============================================================

def get_user_by_id(user_id: int) -> dict:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(f"SELECT {USER_COLUMNS} FROM users WHERE id = %s", (user_id,))

        user = cursor.fetchone()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        return dict(user)

    finally:
        if conn:
            conn.close()


# ============================================================
# GET USER BY EMAIL (includes password hash, login only)
# ============================================================

def get_user_by_email(email: str) -> Optional[dict]:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE lower(email) = lower(%s)",
            (email.strip(),),
        )
        user = cursor.fetchone()
        return dict(user) if user else None

    finally:
        if conn:
            conn.close()


# ============================================================
# CREATE USER
# ============================================================

def create_user(email: str, password: str, company_profile: CompanyProfile) -> dict:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        if "@" not in email:
            raise HTTPException(status_code=400, detail="Invalid email format")

        cursor.execute("SELECT id FROM users WHERE lower(email) = lower(%s)", (email.strip(),))
        if cursor.fetchone():
            raise HTTPException(status_code=400, detail="Email already exists")

        cursor.execute(
            f"""
            INSERT INTO users (email, password_hash, company_profile, is_active)
            VALUES (%s, %s, %s, %s)
            RETURNING {USER_COLUMNS}
            """,
            (email.strip(), get_password_hash(password), Json(company_profile.model_dump()), True),
        )
        user = dict(cursor.fetchone())
        conn.commit()

        logger.info("Registered user %s", user["id"])
        return user

    except HTTPException:
        if conn:
            conn.rollback()
        raise
    except psycopg2.Error as e:
        if conn:
            conn.rollback()
        logger.exception("Registration failed")
        raise HTTPException(status_code=500, detail=f"Registration failed: {str(e)}")
    finally:
        if conn:
            conn.close()


# ============================================================
# UPDATE COMPANY PROFILE
# ============================================================

def update_company_profile(user_id: int, company_profile: CompanyProfile) -> dict:
    """Existing invoices keep their own copy; only new invoices see the change."""
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute(
            f"""
            UPDATE users SET company_profile = %s
            WHERE id = %s
            RETURNING {USER_COLUMNS}
            """,
            (Json(company_profile.model_dump()), user_id),
        )
        user = cursor.fetchone()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        conn.commit()
        return dict(user)

    except HTTPException:
        if conn:
            conn.rollback()
        raise
    except psycopg2.Error as e:
        if conn:
            conn.rollback()
        raise HTTPException(status_code=500, detail=f"Update failed: {str(e)}")
    finally:
        if conn:
            conn.close()


# ============================================================
# UPDATE PASSWORD
# ============================================================

def update_user_password(user_id: int, current_password: str, new_password: str) -> dict:
    conn = None
    try:
        conn = get_db_connection()
        cursor = conn.cursor()

        cursor.execute("SELECT password_hash FROM users WHERE id = %s", (user_id,))
        user = cursor.fetchone()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        if not verify_password(current_password, user["password_hash"]):
            raise HTTPException(status_code=401, detail="Current password is incorrect")

        cursor.execute(
            "UPDATE users SET password_hash = %s WHERE id = %s",
            (get_password_hash(new_password), user_id),
        )
        conn.commit()

        return {"message": "Password updated successfully"}

    except HTTPException:
        if conn:
            conn.rollback()
        raise
    except psycopg2.Error as e:
        if conn:
            conn.rollback()
        raise HTTPException(status_code=500, detail=f"Password update failed: {str(e)}")
    finally:
        if conn:
            conn.close()
