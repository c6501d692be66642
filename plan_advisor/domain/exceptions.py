"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NoOnSalePlansError(DomainException):
    """Catalog has no plan on sale, so no price tier can be derived"""

    pass


class NoCandidatesError(DomainException):
    """Candidate filtering left nothing to choose from"""

    pass


class InvalidPlanError(DomainException):
    """Plan record violates catalog invariants"""

    pass


class InvalidUsageDataError(DomainException):
    """Uploaded usage sheet is unreadable or in an unsupported format"""

    pass


class InvalidPitchRequestError(DomainException):
    """Pitch request is missing plan details or credentials"""

    pass


class PitchGenerationError(DomainException):
    """Language model API returned an error or is unavailable"""

    pass
