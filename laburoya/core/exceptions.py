from typing import Optional


class LaburoYaException(Exception):
    """Error de dominio con el código HTTP con el que se expone al cliente."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundException(LaburoYaException):
    status_code = 404


class UnauthorizedException(LaburoYaException):
    status_code = 403


class AuthenticationException(LaburoYaException):
    status_code = 401


class ValidationException(LaburoYaException):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
