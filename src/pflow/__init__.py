import logging

from .config import PflowConfig, DEFAULT_CONFIG
from .core import (
    NetType,
    NetSpec,
    NetBuilder,
    NetRuntime,
    MarkingStream,
    DispatchEvent,
    build_net,
    index,
    pn,
)
from .declaration import load_declaration, loads_declaration, load_object, dump_declaration
from .exceptions import PflowError

# Library does not configure handlers; callers may configure logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "PflowConfig",
    "DEFAULT_CONFIG",
    "NetType",
    "NetSpec",
    "NetBuilder",
    "NetRuntime",
    "MarkingStream",
    "DispatchEvent",
    "build_net",
    "index",
    "pn",
    "load_declaration",
    "loads_declaration",
    "load_object",
    "dump_declaration",
    "PflowError",
]
