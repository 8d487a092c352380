"""
Admin access gate for the dashboard commands.

The dashboard only asks an Authenticator whether a username/password
pair is acceptable; swap in another implementation to check against a
real identity provider.
"""

import hmac
from abc import ABC, abstractmethod
from typing import Optional

from client.config import ClientConfig


class AuthenticationError(Exception):
    """Credentials rejected or not configured"""


class Authenticator(ABC):
    @abstractmethod
    def authenticate(self, username: str, password: str) -> bool:
        """Return True when the credentials grant admin access"""

    def require(self, username: str, password: str) -> None:
        if not self.authenticate(username, password):
            raise AuthenticationError("Invalid admin credentials")


class StaticCredentialAuthenticator(Authenticator):
    """Compares against one configured username/password in constant time"""

    def __init__(self, username: str, password: Optional[str]):
        self._username = username
        self._password = password

    @classmethod
    def from_config(cls, config: ClientConfig) -> "StaticCredentialAuthenticator":
        return cls(config.admin_username, config.admin_password)

    def authenticate(self, username: str, password: str) -> bool:
        if not self._password:
            # No password configured: nobody gets in
            return False
        user_ok = hmac.compare_digest(username.encode("utf-8"), self._username.encode("utf-8"))
        password_ok = hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))
        return user_ok and password_ok
