"""tasktrack — multi-user task tracker.

Users register and log in, then manage personal to-do items.
Every task operation is scoped to the authenticated owner.
"""

__version__ = "0.1.0"
