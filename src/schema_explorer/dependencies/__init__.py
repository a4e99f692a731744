"""
Dependency analysis.

Provides the live reverse-dependency resolver and the fan-out aggregator
that expands a bounded set of dependents into their definitions.
"""

from schema_explorer.dependencies.fanout import FanOutAggregator
from schema_explorer.dependencies.resolver import DependencyResolver

__all__ = [
    "DependencyResolver",
    "FanOutAggregator",
]
