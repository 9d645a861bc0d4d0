"""Core application constants."""

# Security and redaction
REDACTED = "[REDACTED]"

# Content types
JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"
FALLBACK_CONTENT_TYPE = "application/octet-stream"

# Headers and server params consulted by the request decorator
CONTENT_TYPE_HEADER = "content-type"
REQUESTED_WITH_HEADER = "x-requested-with"
AJAX_REQUESTED_WITH = "xmlhttprequest"
IP_SERVER_PARAMS = ("HTTP_CLIENT_IP", "HTTP_X_FORWARDED_FOR", "REMOTE_ADDR")

# Statuses that never carry a body (and so no Content-Length)
BODYLESS_STATUSES = frozenset({204, 304})

DEFAULT_PROTOCOL_VERSION = "1.1"
