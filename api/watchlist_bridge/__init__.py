"""Bridge public IMDb watchlists and lists to Sonarr custom import lists."""

__version__ = "0.6.1"
