class DuplicateEmailError(Exception):
    """Raised by a user store when the email is already taken at insert time."""

    def __init__(self, email: str):
        super().__init__(f"User with email {email} already exists")
        self.email = email


class UserNotFoundError(Exception):
    pass


class UnknownPaymentProviderError(Exception):
    def __init__(self, name: str):
        super().__init__(f"Unknown payment provider: {name}")
        self.name = name
