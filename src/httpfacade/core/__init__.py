"""
Core building blocks shared by the HTTP components.

    LazySlot - a memoization cell that remembers whether it has been
               computed, independently of the value it holds
"""

from .lazy import LazySlot

__all__ = ["LazySlot"]
