"""Failures raised by the location-response generator.

Every subclass carries the user-facing message; the API returns
``str(exc)`` as the ``error`` field of a 500 response.
"""

GENERATION_FAILED_PREFIX = "Failed to generate response"


class GenerationError(RuntimeError):
    """The model call failed or its output could not be used."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"{GENERATION_FAILED_PREFIX}: {reason}")


class EmptyResponseError(GenerationError):
    def __init__(self) -> None:
        super().__init__("No content in response")


class InvalidResponseFormatError(GenerationError):
    def __init__(self, content: str) -> None:
        self.content = content
        super().__init__("Invalid response format")


class MissingCredentialsError(GenerationError):
    def __init__(self) -> None:
        super().__init__("GOOGLE_API_KEY not set. Please configure it in environment or .env")


class UnknownPersonaError(ValueError):
    def __init__(self, persona_id: str) -> None:
        self.persona_id = persona_id
        super().__init__(f"Unknown persona: {persona_id}")
