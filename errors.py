"""Error taxonomy shared by the relay, the mailbox and the HTTP layer."""


class RelayError(Exception):
    """Base class. `message` is what the caller is allowed to see."""
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.public_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(RelayError):
    status_code = 400
    public_message = "Invalid request"


class ConfigurationError(RelayError):
    status_code = 500
    public_message = "Server configuration error"

    def to_dict(self) -> dict:
        # detail stays in the logs
        return {"error": self.public_message}


class UpstreamForwardError(RelayError):
    status_code = 502
    public_message = "Failed to forward message"


class InternalError(RelayError):
    status_code = 500
    public_message = "Internal server error"
