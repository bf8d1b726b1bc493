"""Community Repair Hub client: signup flow, API clients and Telegram front-end."""

__version__ = "0.1.0"
