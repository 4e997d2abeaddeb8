"""
OAB Tray - Bitcoin price in the system tray

Polls a price endpoint on a timer, shows a short status line with
decorative indicators, remembers the last price between runs and
celebrates (or mourns) big moves with a small text animation.

License: MIT
"""

__version__ = "1.2.0"
