"""
pNodes Bot
==========

Reports the version breakdown of pNode network nodes, queried from a local
JSON-RPC daemon, as a chat message.

Modules:
    - rpc: JSON-RPC 2.0 client
    - stats: Pod aggregation and report rendering
    - bot: Telegram bot serving the /pnodes command
    - cli: Command-line interface for all operations
"""

__version__ = "0.1.0"

from .config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
