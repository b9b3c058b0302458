"""
Dodgem
──────
Keeps your Rocket League Garage trades near the top of the list by
re-saving them on a timer.
"""

VERSION = "1.0.0"
