from __future__ import annotations

from argus.errors import NotFoundError, PermissionDeniedError
from argus.storage.models import ActiveUser, Role, User
from argus.storage.repo import ArgusRepo
from argus.util.logging import get_logger
from argus.util.security import hash_password, is_password_hash, verify_password
from argus.util.time import epoch_millis

logger = get_logger(__name__)


def require_admin(user: ActiveUser | None) -> ActiveUser:
    if user is None or not user.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return user


class AuthService:
    def __init__(self, repo: ArgusRepo) -> None:
        self.repo = repo

    def current_user(self) -> ActiveUser | None:
        return self.repo.get_active_user()

    def _new_user_id(self, users: list[User]) -> str:
        base = f"user-{epoch_millis()}"
        taken = {u.id for u in users}
        candidate, suffix = base, 1
        while candidate in taken:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def signup(self, username: str, password: str, role: Role | None = None) -> bool:
        """Register a user. The first account is always an admin and is signed in."""
        users = self.repo.list_users()
        if any(u.username == username for u in users):
            logger.error("Signup failed: username %s already exists", username)
            return False

        first_user = not users
        assigned: Role = "admin" if first_user else (role or "viewer")
        new_user = User(
            id=self._new_user_id(users),
            username=username,
            password=hash_password(password),
            role=assigned,
        )
        self.repo.save_users([*users, new_user])
        logger.info("Registered user %s as %s", username, assigned)

        if first_user:
            self.repo.set_active_user(new_user.session())
        return True

    def login(self, username: str, password: str) -> ActiveUser | None:
        users = self.repo.list_users()
        for index, user in enumerate(users):
            if user.username != username or not verify_password(password, user.password):
                continue
            if not is_password_hash(user.password):
                users[index] = user.model_copy(update={"password": hash_password(password)})
                self.repo.save_users(users)
                logger.info("Upgraded stored credential for %s", username)
            session = user.session()
            self.repo.set_active_user(session)
            return session
        logger.info("Login failed for %s", username)
        return None

    def logout(self) -> None:
        self.repo.clear_active_user()

    def save_user(
        self,
        username: str,
        password: str | None,
        role: Role,
        user_id: str | None = None,
    ) -> User:
        users = self.repo.list_users()
        if any(u.username == username and u.id != user_id for u in users):
            raise ValueError(f"Username {username} is already taken")

        if user_id is None:
            if not password:
                raise ValueError("Password is required for new users.")
            saved = User(id=self._new_user_id(users), username=username, password=hash_password(password), role=role)
            users.append(saved)
        else:
            index = next((i for i, u in enumerate(users) if u.id == user_id), None)
            if index is None:
                raise NotFoundError(f"User {user_id} not found")
            current = users[index]
            stored_password = hash_password(password) if password else current.password
            saved = User(id=current.id, username=username, password=stored_password, role=role)
            users[index] = saved

        self.repo.save_users(users)
        return saved

    def delete_user(self, user_id: str, acting_user: ActiveUser | None) -> None:
        if acting_user is not None and acting_user.id == user_id:
            raise PermissionDeniedError("Cannot delete yourself")
        users = self.repo.list_users()
        remaining = [u for u in users if u.id != user_id]
        if len(remaining) == len(users):
            raise NotFoundError(f"User {user_id} not found")
        self.repo.save_users(remaining)
