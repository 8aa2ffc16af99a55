"""
Error taxonomy shared by the services and routers
"""


class QuizforgeError(Exception):
    """Base class for errors raised by quizforge services."""


class ExtractionFailure(QuizforgeError):
    """Raised when text could not be extracted from one uploaded file."""
    def __init__(self, filename, message=None):
        self.filename = filename
        self.message = message or f"Failed to extract text from: {filename}"
        super().__init__(self.message)


class GenerationFailure(QuizforgeError):
    """Raised when a quiz request is malformed (no documents, bad config)."""


class NotFound(QuizforgeError):
    """Raised when a document or quiz identifier is unknown to the store."""
    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")
