from .router import router
from .service import verify_token, get_current_user, create_access_token, verify_password, get_password_hash

__all__ = ['router', 'verify_token', 'get_current_user', 'create_access_token', 'verify_password', 'get_password_hash']
