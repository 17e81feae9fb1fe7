"""
Type aliases shared across the codebase.
"""
import logging
from typing import TYPE_CHECKING, Any, Mapping, Union

# Only the stubs declare the adapter as generic.
if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# Anything that can log: a module logger, or a per-object adapter.
Logger = Union[logging.Logger, LoggerAdapter]

# A parsed but not yet materialized document: as it comes from YAML/JSON or from the API.
RawDocument = Mapping[str, Any]
