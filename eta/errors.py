class ETAError(Exception):
    """Base exception for the ETA core."""
    pass

class InvalidInput(ETAError, ValueError):
    """Raised when a numeric input is non-finite or outside its domain."""
    pass

class InvalidCarrierMode(InvalidInput):
    """Raised when a carrier tag is not one of the known carrier modes."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unknown carrier mode: {value!r}")
