from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from inventory_api.models.user import User
from inventory_api.schemas.auth import UserRegister, UserLogin
from inventory_api.services.result import Result
from inventory_api.utils.security import PasswordHasher

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login or password"


class UserService:
    """Registration and password checks. The hasher is supplied by the caller."""

    def __init__(self, db: Session, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    def register(self, registration: UserRegister) -> Result[User]:
        """
        Register a new user.

        Returns:
            Result with the created user, or a conflict if the username is taken
        """
        if self.db.query(User.id).filter(User.username == registration.login).first():
            return Result.conflict(f"User '{registration.login}' is already registered")

        user = User(
            username=registration.login,
            password_hash=self.hasher.hash(registration.password),
        )
        self.db.add(user)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error registering user: {e}")
            return Result.conflict(f"User '{registration.login}' is already registered")
        self.db.refresh(user)

        logger.info(f"User '{user.username}' registered")
        return Result.success(user)

    def authenticate(self, credentials: UserLogin) -> Result[User]:
        """
        Check a login/password pair.

        Unknown users and wrong passwords produce the same bad request so
        the response does not reveal which usernames exist.
        """
        user = self.db.query(User).filter(User.username == credentials.login).first()

        if not user or not self.hasher.verify(credentials.password, user.password_hash):
            logger.info(f"Failed login attempt for '{credentials.login}'")
            return Result.bad_request(INVALID_CREDENTIALS)

        return Result.success(user)
