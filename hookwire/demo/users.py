"""
User module: a stub repository and a service on top of it.

The repository and service are registered through a ``Module`` so their
events carry the module name; ``run_app`` is the invoke target.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..application.options import Invoke, Module, Option, Provide

logger = logging.getLogger(__name__)


class UserNotFoundError(LookupError):
    """Raised when a user id is unknown."""
    pass


class IUserRepository(ABC):
    """Persistence interface for users."""

    @abstractmethod
    def save(self, username: str) -> None:
        pass

    @abstractmethod
    def find(self, user_id: str) -> str:
        """
        Raises:
            UserNotFoundError: If the id is unknown
        """
        pass


class IUserService(ABC):
    """User use cases."""

    @abstractmethod
    def save_user(self, username: str) -> None:
        pass

    @abstractmethod
    def user(self, user_id: str) -> str:
        pass


class DatabaseRepository(IUserRepository):
    """Stub repository standing in for a database."""

    def save(self, username: str) -> None:
        logger.debug(f"Saving user {username!r}")

    def find(self, user_id: str) -> str:
        if user_id == "1":
            return "found user"
        raise UserNotFoundError(f"user not found: {user_id}")


class UserService(IUserService):
    def __init__(self, repository: IUserRepository) -> None:
        self._repository = repository

    def save_user(self, username: str) -> None:
        self._repository.save(username)

    def user(self, user_id: str) -> str:
        return self._repository.find(user_id)


def new_repository() -> IUserRepository:
    return DatabaseRepository()


def new_service(repository: IUserRepository) -> IUserService:
    return UserService(repository)


UserModule = Module(
    "users",
    Provide(new_repository),
    Provide(new_service),
)


def run_app(service: IUserService) -> None:
    """Save a user and read one back; errors are logged, not raised."""
    try:
        service.save_user("example user")
    except Exception as e:
        logger.error(f"Error saving user: {e}")
        return

    try:
        found = service.user("1")
    except UserNotFoundError as e:
        logger.error(f"Error getting user: {e}")
        return

    logger.info(f"Retrieved user: {found}")


def users_options() -> List[Option]:
    return [UserModule, Invoke(run_app)]
