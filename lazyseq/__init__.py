"""
 _                      ___
| |    __ _  ____ _  _ / __| ___  __ _
| |__ / _` ||_ / || ||\__ \/ -_)/ _` |
|____|\__,_|/__|\_, ||___/\___|\__, |
                |__/              |_|
"""

# expose the main class
from .sequence import Sequence

# expose the factory functions
from .factories import (
    from_collection,
    from_iterable,
    of,
    empty,
    from_range,
    generate,
    iterate,
    concat,
    random_supplier,
    seq,
    S
)

# expose supporting types
from .types import Option, Stage, SequenceState

# expose errors
from .errors import (
    SequenceError,
    ClosedSequenceError,
    InvalidArgumentError,
    NoValueError
)

# expose configuration
from .config import EngineConfig, get_config, configure, reset_config
from .parallel import shutdown_pool

# define what `import *` does
__all__ = [
    "Sequence",
    "from_collection",
    "from_iterable",
    "of",
    "empty",
    "from_range",
    "generate",
    "iterate",
    "concat",
    "random_supplier",
    "seq",
    "S",
    "Option",
    "Stage",
    "SequenceState",
    "SequenceError",
    "ClosedSequenceError",
    "InvalidArgumentError",
    "NoValueError",
    "EngineConfig",
    "get_config",
    "configure",
    "reset_config",
    "shutdown_pool"
]
