"""
Custom exceptions for the ranking aggregation engine with caller-friendly messages.

There is no not-found exception: lookups that match nothing return None.
"""

class RankingException(Exception):
    """Base exception for ranking-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class InvalidArgumentError(RankingException):
    """Raised when a query argument or scope is malformed."""
    def __init__(self, argument: str, reason: str):
        super().__init__(
            f"Invalid argument '{argument}': {reason}",
            f"Invalid {argument}: {reason}"
        )
        self.argument = argument
        self.reason = reason

class UpstreamUnavailableError(RankingException):
    """Raised when the ranking store or name lookup fails."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Upstream failure during {operation}: {details}",
            "Ranking data is temporarily unavailable. Please try again later."
        )
        self.operation = operation
