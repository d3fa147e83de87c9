"""
Custom exceptions
"""


class CoinDashError(Exception):
    """Base exception for all custom exceptions"""
    pass


class UnexpectedResponseError(CoinDashError):
    """Upstream API answered with a body we can't use"""
    pass


class UnknownCoinError(CoinDashError):
    """Coin id is not part of the tracked set"""

    def __init__(self, coin_id: str):
        super().__init__(f"Unknown coin id '{coin_id}'")
        self.coin_id = coin_id
