"""Parameter buckets and JSON body ingestion.

A request exposes its parameters through four buckets:

- **query**: decoded query string
- **post**: form fields or JSON object of a POST
- **put**: JSON object of a PUT/PATCH/UPDATE
- **request**: merged view, query first, then post/put values on top

Route parameters live apart from the buckets; the router fills them after a
match, and ``Request.get_param`` reads them first.
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from courier.core.constants import JSON_CONTENT_TYPE
from courier.core.serialization import decode_json_object
from courier.core.types import ParamBucket
from courier.http.methods import RequestMethod


@dataclass
class ParameterBuckets:
    """Mutable parameter buckets of a single request."""

    query: ParamBucket = field(default_factory=dict)
    post: ParamBucket = field(default_factory=dict)
    put: ParamBucket = field(default_factory=dict)
    request: ParamBucket = field(default_factory=dict)

    @classmethod
    def seed(
        cls,
        method: RequestMethod,
        query: Mapping[str, Any],
        parsed_body: Any = None,  # noqa: ANN401 - form data, decoded JSON or None
    ) -> ParameterBuckets:
        """Build buckets from already-decoded request data."""
        buckets = cls(query=dict(query), request=dict(query))
        if isinstance(parsed_body, Mapping):
            buckets.absorb(method, parsed_body)
        return buckets

    def absorb(self, method: RequestMethod, data: Mapping[str, Any]) -> None:
        """Merge body data into the bucket the method routes it to.

        POST goes to ``post``; PUT, PATCH and UPDATE go to ``put``; GET goes
        to ``query``. The merged ``request`` view receives the data as well.
        Incoming values win on key collisions. Other methods are ignored.
        """
        if method is RequestMethod.POST:
            target = self.post
        elif method.is_update:
            target = self.put
        elif method is RequestMethod.GET:
            target = self.query
        else:
            return
        target.update(data)
        self.request.update(data)

    def to_dict(self) -> dict[str, ParamBucket]:
        return {
            "query": dict(self.query),
            "post": dict(self.post),
            "put": dict(self.put),
            "request": dict(self.request),
        }


def is_json_content_type(content_types: str | Iterable[str]) -> bool:
    """Check whether any Content-Type value is ``application/json``.

    Parameters after ``;`` are ignored and the comparison is case-insensitive.
    """
    values = [content_types] if isinstance(content_types, str) else content_types
    return any(
        value.split(";", 1)[0].strip().lower() == JSON_CONTENT_TYPE for value in values
    )


class BodyIngestor:
    """Decode JSON request bodies into parameter buckets."""

    def ingest(
        self,
        content_type: str | Iterable[str],
        method: RequestMethod,
        raw_body: bytes | io.BytesIO,
        buckets: ParameterBuckets,
    ) -> dict[str, Any] | None:
        """Merge a JSON body into ``buckets``.

        Args:
            content_type: Content-Type header value(s) of the request.
            method: Normalized request method.
            raw_body: Body bytes, or a stream that is read and rewound.
            buckets: Buckets to merge into.

        Returns:
            dict[str, Any] | None: The decoded object, or None when the body
                is not JSON or is empty.

        Raises:
            MalformedBody: If the body is declared as JSON but is not a JSON object.
        """
        if not is_json_content_type(content_type):
            return None

        if isinstance(raw_body, io.BytesIO):
            position = raw_body.tell()
            raw_body.seek(0)
            content = raw_body.read()
            raw_body.seek(position)
        else:
            content = raw_body

        data = decode_json_object(content)
        if data is None:
            return None

        buckets.absorb(method, data)
        logger.debug(
            "Ingested JSON body",
            method=method.value,
            keys=sorted(data),
        )
        return data
