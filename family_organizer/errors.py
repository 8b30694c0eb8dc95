"""Domain errors raised by the access-control and search services"""


class OrganizerError(Exception):
    """Base class for domain errors mapped to HTTP responses in main.py"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidVisibilityError(OrganizerError):
    """A stored resource carries a visibility outside PRIVATE/FAMILY/ADULT"""

    status_code = 500

    def __init__(self, value):
        super().__init__(f"Invalid visibility value: {value!r}")
        self.value = value


class InvalidRoleError(OrganizerError):
    """A member carries a role outside CHILD/ADULT/ADMIN"""

    status_code = 500

    def __init__(self, value):
        super().__init__(f"Invalid role value: {value!r}")
        self.value = value


class InvalidQueryError(OrganizerError):
    """Search query is empty or shorter than the minimum length"""

    status_code = 400

    def __init__(self, min_length: int = 2):
        super().__init__(f"Query must be at least {min_length} characters long")
        self.min_length = min_length
