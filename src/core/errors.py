class TipError(Exception):
    """Base error for a tip request. Rendered to the caller as ``{"message": ...}``."""

    status_code: int = 500
    message: str = "Error desconocido"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidSenderAddress(TipError):
    status_code = 400
    message = "Invalid sender address"


class MissingAmount(TipError):
    status_code = 400
    message = "Amount parameter is required"


class InvalidAmount(TipError):
    status_code = 400
    message = "Invalid amount"


class BlockhashUnavailable(TipError):
    status_code = 502
    message = "Unable to fetch recent blockhash"


class BlockhashTimeout(BlockhashUnavailable):
    status_code = 504
    message = "Timed out fetching recent blockhash"


class SerializationFailed(TipError):
    status_code = 500
    message = "Unable to serialize transaction"
