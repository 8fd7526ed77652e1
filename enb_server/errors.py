"""Domain errors raised by repos and services.

Not-found conditions subclass ``KeyError`` and rule violations subclass
``ValueError`` so routers can map them to 404 / 400 the same way they map
the builtin exceptions.
"""


class NotFoundError(KeyError):
    """Base class for lookups that found nothing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class AccountNotFound(NotFoundError):
    def __init__(self, wallet_address: str):
        super().__init__(f"Account {wallet_address} not found")
        self.wallet_address = wallet_address


class InvitationCodeNotFound(NotFoundError):
    def __init__(self, code: str):
        super().__init__(f"Invitation code {code} not found")
        self.code = code


class DomainRuleError(ValueError):
    """Base class for requests that break a business rule."""


class AccountExists(DomainRuleError):
    pass


class AccountNotActivated(DomainRuleError):
    pass


class AlreadyActivated(DomainRuleError):
    pass


class InvalidCode(DomainRuleError):
    pass


class SelfInvitation(DomainRuleError):
    pass


class InviterNotActivated(DomainRuleError):
    pass


class UsageLimitExceeded(DomainRuleError):
    pass


class DuplicateUsage(DomainRuleError):
    pass


class CodeTaken(DomainRuleError):
    pass


class AlreadyClaimedToday(DomainRuleError):
    pass


class InsufficientBalance(DomainRuleError):
    pass


class InvalidUpgrade(DomainRuleError):
    pass


class ConcurrentUpdate(Exception):
    """A compare-and-swap write lost the race against another request."""
