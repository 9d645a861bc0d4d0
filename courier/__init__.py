"""Courier - HTTP request/response decorator layer.

Courier wraps immutable server-side HTTP messages with the conveniences a web
framework needs on top of them: route path resolution, JSON body ingestion,
route dispatch, validated mapping of request data onto typed objects, and
standard success/error API payloads.

Architecture Overview:
- **Core Layer**: Configuration, logging, exceptions and serialization
- **HTTP Layer**: Message, request/response decorators, factories, CLI variant
- **Validation Layer**: Denormalization and two-pass validation of request data
- **API Layer**: Error/success payload schemas, error conversion and ASGI host

URI parsing, header storage and multipart handling are delegated to Starlette;
mapping and validation are delegated to Pydantic. Routing is provided by the
host framework through the ``Router`` protocol.
"""

__version__ = "0.4.0"
