"""
Custom exception classes for the X Post Generator application.
These exceptions provide meaningful error messages, HTTP status codes and a
machine-readable error label for the JSON error envelope.
"""


class PostGeneratorException(Exception):
    """Base exception for all application errors."""

    error = "internal_error"

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationException(PostGeneratorException):
    """Raised when caller input fails validation."""

    error = "validation_error"

    def __init__(self, message: str, field: str = None):
        super().__init__(message=message, status_code=400)
        self.field = field


class PromptNotFoundException(PostGeneratorException):
    """Raised when a prompt is not found."""

    error = "not_found"

    def __init__(self, prompt_id: str):
        super().__init__(
            message=f"Prompt not found: {prompt_id}",
            status_code=404
        )
        self.prompt_id = prompt_id


class LastPromptException(PostGeneratorException):
    """Raised when deleting a prompt would leave the store empty."""

    error = "last_prompt"

    def __init__(self, prompt_id: str):
        super().__init__(
            message="Cannot delete the last prompt",
            status_code=400
        )
        self.prompt_id = prompt_id


class StoredPromptsDisabledException(PostGeneratorException):
    """Raised when stored prompts are used in a fixed-prompt deployment."""

    error = "not_found"

    def __init__(self):
        super().__init__(
            message="Stored prompts are not available in this deployment",
            status_code=404
        )


class StorageIOException(PostGeneratorException):
    """Raised when the prompt document cannot be read, parsed or written."""

    error = "storage_error"

    def __init__(self, operation: str, path: str, error: str):
        super().__init__(
            message=f"Prompt storage {operation} failed for {path}: {error}",
            status_code=500
        )
        self.operation = operation
        self.path = path
        self.detail = error


class ProviderException(PostGeneratorException):
    """Base for classified text-generation provider failures."""

    error = "upstream_error"

    def __init__(self, provider: str, message: str, status_code: int = 500):
        super().__init__(message=message, status_code=status_code)
        self.provider = provider


class ProviderAuthException(ProviderException):
    """Raised when the provider credential is missing or rejected."""

    error = "auth_error"

    def __init__(self, provider: str):
        super().__init__(
            provider=provider,
            message=f"The {provider} API key is missing or invalid. Please check server settings.",
            status_code=500
        )


class RateLimitException(ProviderException):
    """Raised when the provider signals a rate limit or exhausted quota."""

    error = "rate_limit"

    def __init__(self, provider: str):
        super().__init__(
            provider=provider,
            message="You've reached the API rate limit or quota. Please try again later.",
            status_code=429
        )


class ContentPolicyException(ProviderException):
    """Raised when the provider blocks the request or output on policy grounds."""

    error = "content_policy"

    def __init__(self, provider: str):
        super().__init__(
            provider=provider,
            message="The content was blocked by safety filters. Please try a different topic.",
            status_code=400
        )


class UpstreamException(ProviderException):
    """Raised for any other provider failure."""

    error = "upstream_error"

    def __init__(self, provider: str, reason: str = None):
        message = "Failed to generate post. Please try again."
        if reason:
            message = f"Failed to generate post: {reason}"
        super().__init__(provider=provider, message=message, status_code=500)
        self.reason = reason
