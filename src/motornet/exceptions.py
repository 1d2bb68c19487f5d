class InvalidParameterError(ValueError):
    """Network or motion parameters failed validation."""
    def __init__(self, message="Invalid simulation parameters."):
        super().__init__(message)

class EmptyNetworkError(ValueError):
    """Operation requires at least one tube segment."""
    def __init__(self, message="Tube network has no segments."):
        super().__init__(message)

class UnsupportedExportError(ValueError):
    """Export sink name not recognised."""
    def __init__(self, message="Export type not supported."):
        super().__init__(message)

class InvalidExportRequestError(ValueError):
    """Export request could not be interpreted."""
    def __init__(self, message="Unable to interpret export request."):
        super().__init__(message)
