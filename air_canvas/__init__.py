"""
Air Canvas: рисование в воздухе указательным пальцем перед веб-камерой.
"""

__version__ = "0.1.0"
