"""Account management exports."""

from .exceptions import AccountAlreadyExistsError, AccountError, AccountNotFoundError
from .models import UNSET, Account, AccountCreateInput, AccountUpdateInput, Actor
from .service import AccountService

__all__ = [
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountError",
    "AccountNotFoundError",
    "AccountService",
    "AccountUpdateInput",
    "Actor",
    "UNSET",
]
