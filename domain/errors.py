class DomainError(ValueError):
    """Raised when a value cannot be turned into a valid domain object."""
