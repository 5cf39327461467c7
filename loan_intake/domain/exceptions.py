"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PersistenceFailure(DomainException):
    """Storage could not register an application or write its decision"""

    def __init__(self, message: str, application_id: int | None = None):
        super().__init__(message)
        self.application_id = application_id


class ApplicationNotFoundError(DomainException):
    """No loan application exists with the given identifier"""

    def __init__(self, application_id: int):
        super().__init__(f"Loan application {application_id} not found")
        self.application_id = application_id
