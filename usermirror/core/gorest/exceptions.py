"""Gateway exceptions for the remote users API."""


class GatewayError(Exception):
    """Base exception for all remote users API operations."""
    pass


class TransportError(GatewayError):
    """Network failure or unexpected response from the users API.
    
    Attributes:
        status_code: Effective HTTP status (0 when no response arrived)
        message: Error message from response or transport layer
        endpoint: API endpoint that failed
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class ResponseFormatError(TransportError):
    """Response body does not match the expected envelope."""
    pass


class ValidationError(GatewayError):
    """Mutating call rejected by the users API with a 4xx status.
    
    Attributes:
        status_code: Effective HTTP status
        message: Summary message
        endpoint: API endpoint that failed
        field_errors: Field name -> message, when the server reported them
    """
    
    def __init__(self, status_code: int, message: str, endpoint: str, field_errors: dict | None = None):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        self.field_errors = dict(field_errors or {})
        super().__init__(f"[{status_code}] {endpoint}: {message}")
