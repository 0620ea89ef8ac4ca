"""
Business exceptions raised by the service layer

Each exception carries the HTTP status the API boundary answers with.
"""


class MarketplaceError(Exception):
    """Base exception for marketplace business errors"""
    status_code = 422
    
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MarketplaceError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    """Product does not exist or was deleted"""
    
    def __init__(self, product_id: int):
        super().__init__(f"Product with id={product_id} not found")
        self.product_id = product_id


class CartItemNotFoundError(NotFoundError):
    def __init__(self, item_id: int):
        super().__init__(f"Cart item with id={item_id} not found")


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Order with id={order_id} not found")


class OutOfStockError(MarketplaceError):
    """Cart request exceeds available stock"""
    status_code = 400


class ProductUnavailableError(MarketplaceError):
    """A product disappeared between cart and checkout"""


class InsufficientStockError(MarketplaceError):
    """Stock could not cover the requested quantity during settlement"""
    
    def __init__(self, product_name: str):
        super().__init__(f"Insufficient stock for {product_name}.")
        self.product_name = product_name


class InsufficientPointsError(MarketplaceError):
    status_code = 400
    
    def __init__(self, balance: int, required: int):
        super().__init__("Insufficient points")
        self.balance = balance
        self.required = required


class InvalidStatusTransitionError(MarketplaceError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change order status from {current} to {requested}.")
        self.current = current
        self.requested = requested


class AuthenticationError(MarketplaceError):
    status_code = 401


class PermissionDeniedError(MarketplaceError):
    status_code = 403


class AuthServiceUnavailableError(MarketplaceError):
    status_code = 503
