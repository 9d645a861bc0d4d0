"""Best-effort denormalization of raw request data into Pydantic models.

``ObjectMapper`` builds instances with ``model_construct``: values are
assigned as given, without coercion or validation, so type mismatches are
left for the validator to report. Nested models and lists of models are
constructed recursively. Required fields missing from the data are set to
None; optional fields keep their defaults.
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo


def _model_type(annotation: Any) -> type[BaseModel] | None:  # noqa: ANN401
    """The model class an annotation refers to, unwrapping ``X | None``."""
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    if get_origin(annotation) in (Union, types.UnionType):
        for arg in get_args(annotation):
            model = _model_type(arg)
            if model is not None:
                return model
    return None


def _list_item_model(annotation: Any) -> type[BaseModel] | None:  # noqa: ANN401
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        for arg in get_args(annotation):
            model = _list_item_model(arg)
            if model is not None:
                return model
        return None
    if origin in (list, tuple, set, frozenset):
        args = get_args(annotation)
        return _model_type(args[0]) if args else None
    return None


class ObjectMapper:
    """Construct models from raw mappings without validation."""

    def map[M: BaseModel](self, data: Mapping[str, Any] | None, target: type[M]) -> M:
        """Denormalize ``data`` into an instance of ``target``.

        Args:
            data: Raw request data; anything but a mapping maps as empty.
            target: Model class to construct.

        Returns:
            M: A constructed, unvalidated instance.
        """
        source = data if isinstance(data, Mapping) else {}
        values: dict[str, Any] = {}
        for name, info in target.model_fields.items():
            key = self._source_key(name, info, source)
            if key is None:
                if info.is_required():
                    values[name] = None
                continue
            values[name] = self._convert(source[key], info.annotation)
        return target.model_construct(**values)

    @staticmethod
    def _source_key(name: str, info: FieldInfo, source: Mapping[str, Any]) -> str | None:
        if info.alias and info.alias in source:
            return info.alias
        if name in source:
            return name
        return None

    def _convert(self, value: Any, annotation: Any) -> Any:  # noqa: ANN401
        if isinstance(value, Mapping):
            model = _model_type(annotation)
            if model is not None:
                return self.map(value, model)
        elif isinstance(value, list):
            item_model = _list_item_model(annotation)
            if item_model is not None:
                return [
                    self.map(item, item_model) if isinstance(item, Mapping) else item
                    for item in value
                ]
        return value
