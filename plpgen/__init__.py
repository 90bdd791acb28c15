"""
plpgen - batch generator for .plp project archives, driven by a Telegram bot.
"""

__version__ = "1.0.0"
