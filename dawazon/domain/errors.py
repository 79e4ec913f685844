# dawazon/domain/errors.py


class CartError(Exception):
    """Bazowy wyjatek domeny koszyka."""


class InvalidArgument(CartError, ValueError):
    """Niepoprawne dane wejsciowe (ilosc, cena, status, brak klienta)."""


class NotFound(CartError, LookupError):
    """Brak koszyka, linii, uzytkownika albo produktu."""


class Forbidden(CartError, PermissionError):
    """Brak uprawnien do zasobu."""


class InvalidState(CartError):
    """Operacja niedozwolona w aktualnym stanie koszyka."""


class InvalidTransition(CartError):
    """Niedozwolona zmiana statusu linii."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition line from {current.value} to {target.value}")


class InsufficientStock(CartError):
    """Za malo towaru w katalogu."""

    def __init__(self, product_id: str, requested: int, available: int | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        msg = f"Insufficient stock for product {product_id}: requested {requested}"
        if available is not None:
            msg += f", available {available}"
        super().__init__(msg)


class ConcurrencyConflict(CartError):
    """Koszyk zmieniony albo zablokowany przez inna operacje."""
