# marketplace/domain/errors.py
"""
Bledy biznesowe rdzenia zamowien.

Kazdy blad niesie kod HTTP, ktory warstwa routerow przekazuje dalej
jako HTTPException. Zaden z nich nie jest bledem krytycznym.
"""


class MarketplaceError(Exception):
    status_code = 400


class NotFound(MarketplaceError):
    status_code = 404


class NotPurchasable(MarketplaceError):
    status_code = 400


class InsufficientStock(MarketplaceError):
    status_code = 409


class InvalidTransition(MarketplaceError):
    status_code = 400


class Unauthorized(MarketplaceError):
    status_code = 403


class EmptyCart(MarketplaceError):
    status_code = 400


class InvalidQuantity(MarketplaceError):
    status_code = 400


class StaleState(MarketplaceError):
    """Inna operacja zmienila zamowienie lub koszyk pierwsza."""

    status_code = 409
