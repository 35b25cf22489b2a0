"""Domain exceptions raised by the service layer and mapped to HTTP statuses by the routers."""


class NotFoundError(LookupError):
    """A referenced user, profile or reference entity does not exist."""

    pass


class AuthenticationRequiredError(Exception):
    """The operation needs an authenticated identity and none was supplied."""

    pass
