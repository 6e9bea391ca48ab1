class ConfigurationError(RuntimeError):
    """Required environment configuration is missing or invalid."""


class InfrastructureError(RuntimeError):
    """
    Unexpected failure in the persistence layer.

    Wraps the underlying database error (available as __cause__) so callers
    above the data access layer never depend on SQLAlchemy exception types.
    """

    def to_dict(self) -> dict[str, str]:
        cause = self.__cause__ or self
        return {"name": type(cause).__name__, "message": str(cause)}
