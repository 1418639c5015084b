"""
User service: the only place where business rules for users are applied.

- Passwords are hashed before they reach the store.
- Reads project to the public field set, so the hash is never loaded for them.
- Store errors are translated into ServiceError subclasses; nothing is swallowed.
"""
import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import DuplicateEmailError, StoreError, StoreUnavailableError, UserNotFoundError
from ..models.user import User
from ..schemas.user_schema import CreateUserDto, UpdateUserDto, UserOut
from ..security import PasswordHasher

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = (User.id, User.name, User.email, User.created_at, User.updated_at)


class UserService:
    def __init__(self, db: Session, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    @contextmanager
    def _store_errors(self, action: str):
        """Roll back and translate SQLAlchemy errors raised inside the block."""
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"[Users] {action} violated a constraint: {e.orig}")
            raise DuplicateEmailError() from e
        except OperationalError as e:
            self.db.rollback()
            logger.error(f"[Users] {action} failed, database unavailable", exc_info=True)
            raise StoreUnavailableError() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[Users] {action} failed", exc_info=True)
            raise StoreError() from e

    def create(self, data: CreateUserDto) -> User:
        """
        Create a user, storing a bcrypt hash instead of the plaintext password.

        Returns the stored row, hash included. Callers must project it through
        UserOut before sending it anywhere.
        """
        hashed_password = self.hasher.hash(data.password)

        user = User(
            email=data.email,
            name=data.name,
            password=hashed_password,
        )
        with self._store_errors("Create user"):
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        logger.info(f"[Users] User created: {user.id}")
        return user

    def update(self, user_id: str, data: UpdateUserDto) -> User:
        """
        Apply the fields present in data. A non-empty password is rehashed;
        anything not sent is left as it was.
        """
        fields = data.model_dump(exclude_unset=True)
        password = fields.pop("password", None)
        # email is required on the row, an explicit null means "leave it"
        if fields.get("email") is None:
            fields.pop("email", None)

        hashed_password = self.hasher.hash(password) if password else None

        with self._store_errors("Update user"):
            user = self.db.get(User, user_id)
            if user is None:
                logger.warning(f"[Users] Update of unknown user {user_id}")
                raise UserNotFoundError(user_id)

            for field, value in fields.items():
                setattr(user, field, value)
            if hashed_password is not None:
                user.password = hashed_password

            self.db.commit()
            self.db.refresh(user)

        changed = sorted(fields) + (["password"] if hashed_password else [])
        logger.info(f"[Users] User updated: {user_id} ({', '.join(changed) or 'no fields'})")
        return user

    def find_all(self) -> List[UserOut]:
        with self._store_errors("List users"):
            rows = self.db.query(*PUBLIC_COLUMNS).order_by(User.created_at.asc()).all()
        return [UserOut.model_validate(row) for row in rows]

    def find_one(self, user_id: str) -> Optional[UserOut]:
        with self._store_errors("Get user"):
            row = self.db.query(*PUBLIC_COLUMNS).filter(User.id == user_id).first()
        if row is None:
            return None
        return UserOut.model_validate(row)

    def remove(self, user_id: str) -> UserOut:
        """Hard-delete a user. Returns the public view of the deleted row."""
        with self._store_errors("Delete user"):
            user = self.db.get(User, user_id)
            if user is None:
                logger.warning(f"[Users] Delete of unknown user {user_id}")
                raise UserNotFoundError(user_id)

            removed = UserOut.model_validate(user)
            self.db.delete(user)
            self.db.commit()

        logger.info(f"[Users] User deleted: {user_id}")
        return removed

    def verify_password(self, user_id: str, password: str) -> bool:
        """Check a candidate password against the stored hash."""
        with self._store_errors("Verify password"):
            hashed = self.db.query(User.password).filter(User.id == user_id).scalar()
        if hashed is None:
            raise UserNotFoundError(user_id)
        return self.hasher.verify(password, hashed)
