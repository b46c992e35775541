# ccc_mocktest/core/exceptions.py
"""
Domain errors raised by services and translated to JSON responses in main.py
"""


class MockTestError(Exception):
    """Base error carrying the HTTP status it maps to"""
    
    status_code = 500
    error = "Internal Server Error"
    error_type = "server_error"
    
    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)
        self.message = message


class ValidationError(MockTestError):
    status_code = 400
    error = "Validation Error"
    error_type = "validation_error"


class DuplicateUserError(ValidationError):
    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class InvalidCredentialsError(ValidationError):
    # Same message for unknown roll number and wrong password
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class NoQuestionsAvailable(ValidationError):
    def __init__(self, message: str = "No questions available"):
        super().__init__(message)


class AttemptLimitReached(ValidationError):
    def __init__(self, message: str = "Test already submitted"):
        super().__init__(message)


class AuthenticationError(MockTestError):
    status_code = 401
    error = "Unauthorized"
    error_type = "authentication_error"


class PermissionDeniedError(MockTestError):
    status_code = 403
    error = "Forbidden"
    error_type = "authorization_error"


class NotFoundError(MockTestError):
    status_code = 404
    error = "Resource Not Found"
    error_type = "not_found_error"
