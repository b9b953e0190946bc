class DomainError(Exception):
    """Base exception for business rule violations.

    ``http_status`` is what the JSON API answers with; page views flash
    the message instead.
    """

    http_status = 400

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class ValidationError(DomainError):
    """Input data is invalid or breaks a business rule."""


class AuthenticationError(DomainError):
    """Bad credentials, unknown/inactive account or an unusable API token."""

    http_status = 401


class AuthorizationError(DomainError):
    """The acting user's role does not allow the action."""

    http_status = 403


class NotFoundError(DomainError):
    """A referenced user, project, task or time entry does not exist."""

    http_status = 404
