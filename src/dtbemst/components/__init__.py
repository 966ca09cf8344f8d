"""Connected-component tracking for the growing spanning tree."""

from dtbemst.components.union_find import ComponentTracker

__all__ = ["ComponentTracker"]
