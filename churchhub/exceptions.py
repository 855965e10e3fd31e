class UnauthorizedError(Exception):
    pass


class MissingFieldsError(Exception):
    def __init__(self, fields):
        super().__init__("Missing required fields")
        self.fields = fields


class ValidationError(ValueError):
    pass


class NotFoundError(Exception):
    pass


class ConflictError(Exception):
    pass


class InvalidTransitionError(Exception):
    def __init__(self, current, target):
        super().__init__(f"Cannot move a {current} role request to {target}")
        self.current = current
        self.target = target


class StorageError(Exception):
    pass


class SubscriptionClosedError(Exception):
    pass
