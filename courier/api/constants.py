"""API-related constants."""

# Titles used when an error has no more specific message
INTERNAL_ERROR_TITLE = "Internal server error"
PRODUCTION_ERROR_TITLE = "An internal server error occurred"
MALFORMED_BODY_TITLE = "Malformed request body"
VALIDATION_ERROR_TITLE = "Request validation failed"

# Response payload defaults
SUCCESS_MESSAGE = "Success"
