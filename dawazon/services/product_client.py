# dawazon/services/product_client.py
import requests

from dawazon.domain.errors import InsufficientStock, NotFound
from dawazon.utils.retry import http_retry
from dawazon.utils.settings import PRODUCT_SERVICE_URL
from dawazon.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """
    Klient HTTP katalogu produktow.
    Katalog jest zrodlem prawdy dla ceny, stanu magazynu i sprzedawcy (creator_id).
    """

    def __init__(self, base_url: str | None = None, timeout: int = 2, session: requests.Session | None = None):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @http_retry()
    def fetch_product(self, product_id: str) -> dict:
        url = f"{self.base_url}/products/{product_id}"
        logger.info("ProductClient GET", url=url)

        resp = self.session.get(url, timeout=self.timeout)
        if resp.status_code == 404:
            raise NotFound(f"Product {product_id} not found")
        resp.raise_for_status()
        return resp.json()

    #zmiana stanu nie jest idempotentna - ponawiamy tylko gdy request nie doszedl
    @http_retry(exceptions=(requests.ConnectionError,))
    def adjust_stock(self, product_id: str, delta: int) -> int:
        url = f"{self.base_url}/products/{product_id}/stock"
        logger.info("ProductClient POST", url=url, delta=delta)

        resp = self.session.post(url, json={"delta": delta}, timeout=self.timeout)
        if resp.status_code == 404:
            raise NotFound(f"Product {product_id} not found")
        if resp.status_code == 409:
            detail = resp.json().get("detail")
            available = detail.get("available") if isinstance(detail, dict) else None
            raise InsufficientStock(product_id, -delta, available)
        resp.raise_for_status()
        return resp.json()["stock"]
