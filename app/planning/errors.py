"""Errors raised by the planning rules.

Every error is local and recoverable. Each class carries the HTTP status
the API answers with, so routes can raise them directly and a single
handler in ``app.main`` turns them into JSON responses.
"""


class PlanningError(Exception):
    """Base class for planning errors."""

    status_code: int = 400
    error: str = "planning_error"
    detail: str = "The request could not be applied"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.detail
        super().__init__(self.detail)


class AlreadyVotedError(PlanningError):
    """The user already voted for this option."""

    status_code = 409
    error = "already_voted"
    detail = "You have already voted for this option"


class NotVotedError(PlanningError):
    """The user has no vote on this option to remove."""

    status_code = 409
    error = "not_voted"
    detail = "You have not voted for this option"


class InvalidDateError(PlanningError):
    """A date option could not be parsed as a calendar date."""

    status_code = 422
    error = "invalid_date"
    detail = "The winning date is not a valid date"


class NoDateOptionsError(PlanningError):
    """The event has no date options, so no date is decided."""

    status_code = 422
    error = "no_date_options"
    detail = "No date has been decided for this event yet"


class UnauthorizedError(PlanningError):
    """The user's role does not allow this action."""

    status_code = 403
    error = "unauthorized"
    detail = "You are not allowed to perform this action"


class WindowClosedError(PlanningError):
    """Voting or RSVP is closed for this event."""

    status_code = 403
    error = "window_closed"
    detail = "This action is closed for the event"
