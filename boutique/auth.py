# boutique/auth.py
from .database import ADMIN_AUTH_KEY, Storage
from .log import get_logger

logger = get_logger(__name__)

AUTHENTICATED = "authenticated"
LOGIN_FAILED_MESSAGE = "Incorrect password"


class AdminSession:
    """Session-scoped admin flag behind a fixed password.

    This gates the admin screens for a trusted local user. It is not a
    security mechanism.
    """

    def __init__(self, session_storage: Storage, password: str):
        self.session_storage = session_storage
        self._password = password

    def is_authenticated(self) -> bool:
        return self.session_storage.read(ADMIN_AUTH_KEY) == AUTHENTICATED

    def login(self, password: str) -> bool:
        if password != self._password:
            logger.info("admin login rejected")
            return False
        self.session_storage.write(ADMIN_AUTH_KEY, AUTHENTICATED)
        logger.info("admin logged in")
        return True

    def logout(self) -> None:
        self.session_storage.delete(ADMIN_AUTH_KEY)
        logger.info("admin logged out")
