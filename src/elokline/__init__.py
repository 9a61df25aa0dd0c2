"""elokline: daily rating candlesticks from Lichess game history."""

__version__ = "0.1.0"
