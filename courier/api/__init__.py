"""API surface: response payload schemas, error conversion and the ASGI host."""
