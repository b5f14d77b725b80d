"""tabgrouper: classify URLs into named groups from manual patterns and auto-pattern templates."""

__version__ = "0.1.0"
