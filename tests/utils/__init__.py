# tests/utils/__init__.py

from .patch_everywhere import patch_everywhere
from .trace import TRACE, make_trace
from .upstream import UPSTREAM_FILES, Call, FakeRunner, make_upstream_tree

__all__ = [
    "TRACE",
    "UPSTREAM_FILES",
    "Call",
    "FakeRunner",
    "make_trace",
    "make_upstream_tree",
    "patch_everywhere",
]
