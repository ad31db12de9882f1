from breathe.io.console import ConsoleRenderer, render
from breathe.io.notifier import Notifier

__all__ = ["ConsoleRenderer", "Notifier", "render"]
