class ResamplingError(Exception):
    """Base error carrying the repetition and model that triggered it."""

    def __init__(
        self,
        message: str,
        repetition: int | None = None,
        model_id: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.repetition = repetition
        self.model_id = model_id

    def __str__(self) -> str:
        context = []
        if self.repetition is not None:
            context.append(f"repetition={self.repetition}")
        if self.model_id is not None:
            context.append(f"model={self.model_id}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"

    def __reduce__(self):
        # joblib workers pickle errors back to the parent
        return (self.__class__, (self.message, self.repetition, self.model_id))

    def with_context(
        self,
        repetition: int | None = None,
        model_id: str | None = None,
    ) -> "ResamplingError":
        """Return a copy of this error tagged with repetition and model."""
        return self.__class__(
            self.message,
            repetition=repetition if repetition is not None else self.repetition,
            model_id=model_id if model_id is not None else self.model_id,
        )


class InvalidInputError(ResamplingError, ValueError):
    """Empty table, missing columns or out-of-range configuration."""


class FitError(ResamplingError, RuntimeError):
    """Underlying model fit failed (singular design, bad values, ...)."""


class MetricError(InvalidInputError):
    """Metric is undefined for the given data."""
