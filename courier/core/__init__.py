"""Core infrastructure package for shared functionality.

This package provides the foundational components used across all layers
of Courier:

- **config**: Centralized configuration management with environment support
- **exceptions**: Structured exception hierarchy with error codes
- **redaction**: Sensitive data sanitization for safe logging
- **logging**: Structured logging with console and JSON output
- **serialization**: JSON and XML encoding/decoding helpers
- **types**: Type aliases for better code clarity

These modules implement cross-cutting concerns that ensure consistency
and observability throughout the request lifecycle.
"""
