"""Academic decision engine: study priorities, weekly hours, risk, confidence and trends."""

__version__ = "0.1.0"
