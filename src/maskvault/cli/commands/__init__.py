"""CLI command modules for maskvault.

Each module exposes a ``register(subparsers)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import links, masks, sessions, stats

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    masks,
    sessions,
    links,
    stats,
]

__all__ = ["COMMAND_MODULES"]
