"""tabgrouper command surface.

Request/response endpoints a UI or another process uses to edit patterns,
toggle auto-patterns, trigger bulk grouping and report resource events.
Every response carries a ``success`` flag; callers are free to ignore it.
"""
