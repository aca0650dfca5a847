"""Signal engine: indicators, signal analyzer and models.

This package contains pure business logic with no I/O dependencies
(no database, network access or wall clock). It is driven by the
monitor in signal_bot/, which owns data fetching and alert delivery.
"""
