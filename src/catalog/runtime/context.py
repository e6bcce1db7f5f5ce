"""Process-wide configuration, overridable per context."""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Any

from pydantic import BaseModel

from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.config.config_template import load_default_config

# Derived from other fields; never fed back into validation.
_COMPUTED = {"database": {"password", "connection_string"}}


@dataclass
class AppContext:
    config: ConfigData


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=load_default_config())
)


def get_context() -> AppContext:
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    return _app_context.set(context)


def get_config() -> ConfigData:
    """Configuration of the current context."""
    return get_context().config


def _explicit_fields(model: BaseModel) -> dict[str, Any]:
    """Collect the fields that were set on ``model``, at any depth.

    ``model_dump(exclude_unset=True)`` misses a nested model that was only
    mutated in place, so nested models are walked by hand.
    """
    explicit: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_fields(value)
            if nested:
                explicit[name] = nested
            elif name in model.model_fields_set:
                explicit[name] = value.model_dump()
        elif name in model.model_fields_set:
            explicit[name] = value
    return explicit


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def merge_config(base: ConfigData, override: ConfigData) -> ConfigData:
    """Apply the explicitly set fields of ``override`` on top of ``base``."""
    merged = _deep_merge(base.model_dump(exclude=_COMPUTED), _explicit_fields(override))
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[None]:
    """Temporarily override parts of the configuration.

    Example::

        override = ConfigData()
        override.storage.base_dir = "/tmp/uploads"
        with with_context(override):
            assert get_config().storage.base_dir == "/tmp/uploads"
    """
    if config_override is None:
        yield
        return
    if not isinstance(config_override, ConfigData):
        raise ValueError(f"config_override must be ConfigData or None, got {type(config_override)}")

    token = set_context(replace(get_context(), config=merge_config(get_config(), config_override)))
    try:
        yield
    finally:
        _app_context.reset(token)
