"""Exceptions raised by the service layer and caught at the Streamlit boundary."""


class AuthorizationError(PermissionError):
    """The current user may not perform the requested action."""


class InvalidTransitionError(ValueError):
    """A status change that the record's lifecycle does not allow."""


class NotFoundError(LookupError):
    pass


class DuplicateError(ValueError):
    pass
