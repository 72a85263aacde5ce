"""Services module for application layer"""

from snipe.application.services.command_dispatcher import CommandDispatcher

__all__ = ["CommandDispatcher"]
