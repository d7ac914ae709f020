"""In-process spot-market matching engine with order books, market depth and wallets."""

__version__ = "0.1.0"