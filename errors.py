# errors.py
"""Errors that reach the client. Everything else is logged and recovered where it happens."""


class ReminderError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self):
        return {"message": self.message, "code": self.code, **self.extra}


class ValidationFailed(ReminderError):
    status_code = 400
    code = "VALIDATION_ERROR"


class MonthlyLimitExceeded(ReminderError):
    status_code = 403
    code = "MONTHLY_LIMIT_EXCEEDED"

    def __init__(self, count, limit):
        super().__init__(
            f"You've reached your monthly limit of {limit} reminders. Upgrade to Premium for unlimited reminders.",
            count=count, limit=limit,
        )
        self.count = count
        self.limit = limit


class ReminderNotFound(ReminderError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, reminder_id):
        super().__init__("Reminder not found", reminderId=reminder_id)
