"""Login credentials and obtaining them from user-configured shell commands."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import Enum


class AuthenticationType(Enum):
    AUTHENTICATION_USER_PASS = 0


@dataclass(frozen=True)
class LoginCredentials:
    """A username and the secret that authenticates it."""

    username: str
    auth_type: AuthenticationType
    auth_data: bytes = field(repr=False)


def _eval(cmd: str) -> bytes:
    print(f'Executing "{cmd}"')
    result = subprocess.run(["sh", "-c", cmd], stdout=subprocess.PIPE, check=False).stdout
    return result[:-1] if result.endswith(b"\n") else result


def credentials_eval(username_cmd: str, password_cmd: str) -> LoginCredentials:
    """Run both commands with ``sh`` and use their output, less one trailing newline."""
    print("Retrieving username")
    username = _eval(username_cmd).decode("utf-8", errors="replace")
    print("Retrieving password")
    auth_data = _eval(password_cmd)
    return LoginCredentials(
        username=username,
        auth_type=AuthenticationType.AUTHENTICATION_USER_PASS,
        auth_data=auth_data,
    )