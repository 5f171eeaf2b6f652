"""
Binance Spot REST client

Async client for the Binance Spot REST API featuring HMAC-SHA256
request signing and typed responses.
"""

__version__ = "0.1.0"
__author__ = "Binance REST Client Team"
