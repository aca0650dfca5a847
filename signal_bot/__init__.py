"""Signal bot: runtime around the signal engine.

Fetches bars, drives the analyzer on a fixed tick and delivers alerts.
"""
