"""
Binding materialization: writing keys, deleting keys and bindings, and the
confirmation gate that guards both.
"""

from .confirmation import ConfirmationPolicy
from .store import BindingStore
from .writer import BindingWriter

__all__ = [
    "BindingStore",
    "BindingWriter",
    "ConfirmationPolicy",
]
