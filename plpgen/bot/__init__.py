# plpgen/bot/__init__.py
"""
Telegram front end: sessions, menus and the generation wizard.
"""
