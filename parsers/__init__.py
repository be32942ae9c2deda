# Import parser modules for their side effects (they register themselves).
# Registration order is detection order.
from . import single as _single  # noqa: F401
from . import multi_v1 as _multi_v1  # noqa: F401
from . import multi_v2 as _multi_v2  # noqa: F401

# Explicit re-exports for library users.
from .base import (
    REGISTRY as REGISTRY,
)
from .base import (
    StatusParser as StatusParser,
)
from .base import (
    best_parser as best_parser,
)
from .base import (
    register as register,
)
from .errors import (
    EmptyOrUnreadableSource as EmptyOrUnreadableSource,
)
from .errors import (
    FieldCountMismatch as FieldCountMismatch,
)
from .errors import (
    StatusFormatError as StatusFormatError,
)
from .errors import (
    UnrecognizedFormat as UnrecognizedFormat,
)
from .fields import (
    split_fields as split_fields,
)

__all__ = [
    "REGISTRY",
    "EmptyOrUnreadableSource",
    "FieldCountMismatch",
    "StatusFormatError",
    "StatusParser",
    "UnrecognizedFormat",
    "best_parser",
    "register",
    "split_fields",
]
