"""
Dual Thrust breakout strategy - signal generation and historical backtesting.
"""

__version__ = "0.1.0"
