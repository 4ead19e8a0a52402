"""Exception types raised by the erosion simulator."""


class ErosionError(Exception):
    """Base class for simulator errors."""


class UndefinedSlopeError(ErosionError, ValueError):
    """Raised when a least-squares slope has a zero denominator.

    This happens when every sample shares the same x value (or there are no
    samples at all), so the regression line is vertical or undefined.
    """

    def __init__(self, n_samples: int):
        self.n_samples = n_samples
        super().__init__(
            f"Regression slope undefined for {n_samples} samples with identical x values"
        )


class GridExportError(ErosionError):
    """Raised when an ASCII grid cannot be written or parsed."""


class ConfigurationError(ErosionError):
    """Raised when a configuration file cannot be read or validated."""
