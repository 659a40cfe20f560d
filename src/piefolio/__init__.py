"""Portfolio snapshot caching, rate limiting and allocation analysis."""

__version__ = "0.1.0"
