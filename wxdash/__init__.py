"""
wxdash - weather-research dashboard with a persistent widget grid
"""

__version__ = "0.3.0"
