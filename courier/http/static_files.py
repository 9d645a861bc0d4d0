"""Static file short-circuit.

Hosts call ``serve_static_file_if_present`` before path resolution. When the
request URI maps to an existing regular file under the configured document
root, the guard returns a complete response and the host stops handling the
request. Front-controller scripts are never served as static files, and paths
that escape the document root are refused.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from urllib.parse import unquote

from loguru import logger

from courier.core.config import RoutingConfig, Settings, get_settings
from courier.core.constants import FALLBACK_CONTENT_TYPE
from courier.http.response import Response


def _routing(config: Settings | RoutingConfig | None) -> RoutingConfig:
    if config is None:
        return get_settings().routing_config
    if isinstance(config, Settings):
        return config.routing_config
    return config


def resolve_static_path(uri_path: str, config: RoutingConfig) -> Path | None:
    """Map a URI path onto a file below the document root.

    Returns:
        Path | None: The resolved file path, or None when the decoded path
            points outside the document root.
    """
    relative = unquote(uri_path).lstrip("/")
    root = config.document_root.resolve()
    candidate = (root / relative).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        logger.warning("Refused static path outside document root", path=uri_path)
        return None
    return candidate


def _extension(file_path: Path) -> str:
    # "app.css.map" has the suffix ".map", which the table maps like the full name
    return file_path.suffix.lower().lstrip(".")


def _is_servable(file_path: Path, config: RoutingConfig) -> bool:
    if not file_path.is_file():
        return False
    script = config.script_extension
    return not (script and file_path.name.lower().endswith(script))


def is_static_file(uri_path: str, config: Settings | RoutingConfig | None = None) -> bool:
    """Whether ``uri_path`` names an existing non-script file under the root."""
    routing = _routing(config)
    file_path = resolve_static_path(uri_path, routing)
    return file_path is not None and _is_servable(file_path, routing)


def static_file_mime(
    file_path: str | Path, config: Settings | RoutingConfig | None = None
) -> str:
    """Content-Type for a static file.

    The configured extension table wins; other files fall back to
    ``mimetypes`` detection and finally to ``application/octet-stream``.
    """
    routing = _routing(config)
    path = Path(file_path)
    mime = routing.static_mime_types.get(_extension(path))
    if mime:
        return mime
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or FALLBACK_CONTENT_TYPE


def serve_static_file_if_present(
    uri_path: str, settings: Settings | RoutingConfig | None = None
) -> Response | None:
    """Build a response for a static file, if the URI addresses one.

    Args:
        uri_path: Path component of the request URI (percent-encoded).
        settings: Application settings or routing config; defaults to the
            cached settings.

    Returns:
        Response | None: A 200 response with the file bytes and its
            Content-Type, or None when the request is not for a static file.
    """
    routing = _routing(settings)
    file_path = resolve_static_path(uri_path, routing)
    if file_path is None or not _is_servable(file_path, routing):
        return None

    content_type = static_file_mime(file_path, routing)
    logger.debug("Serving static file", path=uri_path, content_type=content_type)
    return (
        Response()
        .with_body(file_path.read_bytes())
        .with_header("Content-Type", content_type)
    )
