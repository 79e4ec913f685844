# dawazon/product_service/main.py
import threading

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

app = FastAPI(title="Product Service (dev mock)")

_lock = threading.Lock()

#katalog z danych startowych, wszystko sprzedaje manager o id 2
PRODUCTS = {
    "Hx9Lp2Ks4TnB": {"id": "Hx9Lp2Ks4TnB", "name": "Smartphone Galaxy S23", "price": 699.99, "stock": 25, "creator_id": 2},
    "Fp2Jk7Xm4YzT": {"id": "Fp2Jk7Xm4YzT", "name": "Funda de silicona", "price": 29.99, "stock": 150, "creator_id": 2},
    "Dk5Mn8Pj2WcX": {"id": "Dk5Mn8Pj2WcX", "name": "Cable USB-C", "price": 19.99, "stock": 300, "creator_id": 2},
    "Gn7Qs4Lv8BxZ": {"id": "Gn7Qs4Lv8BxZ", "name": "Protector de pantalla", "price": 22.99, "stock": 200, "creator_id": 2},
    "Yw3Zq7Vm1RfG": {"id": "Yw3Zq7Vm1RfG", "name": "Portátil UltraBook 14", "price": 1099.99, "stock": 10, "creator_id": 2},
    "Qs1Zw8Ty3NlJ": {"id": "Qs1Zw8Ty3NlJ", "name": "Ratón inalámbrico", "price": 59.99, "stock": 80, "creator_id": 2},
    "Vb4Gx9Hs6MqK": {"id": "Vb4Gx9Hs6MqK", "name": "Tablet Pro 11", "price": 449.99, "stock": 18, "creator_id": 2},
    "Mx7Pk2Vn5RbD": {"id": "Mx7Pk2Vn5RbD", "name": "Monitor 27 4K", "price": 599.99, "stock": 12, "creator_id": 2},
    "Rt6Bv9Nh3QsL": {"id": "Rt6Bv9Nh3QsL", "name": "Alfombrilla XL", "price": 15.99, "stock": 120, "creator_id": 2},
    "Ln8Cv5Dt1WpR": {"id": "Ln8Cv5Dt1WpR", "name": "Auriculares Bluetooth", "price": 89.99, "stock": 40, "creator_id": 2},
    "Jt3Lw6Fh9CmY": {"id": "Jt3Lw6Fh9CmY", "name": "Cargador rápido 65W", "price": 34.99, "stock": 90, "creator_id": 2},
    "Tx5Wr9Km2NhP": {"id": "Tx5Wr9Km2NhP", "name": "Consola NextGen", "price": 1199.99, "stock": 6, "creator_id": 2},
}


class StockDelta(BaseModel):
    delta: int


@app.get("/products")
def list_products():
    return list(PRODUCTS.values())


@app.get("/products/{product_id}")
def get_product(product_id: str):
    product = PRODUCTS.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@app.post("/products/{product_id}/stock")
def adjust_stock(product_id: str, payload: StockDelta):
    with _lock:
        product = PRODUCTS.get(product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")

        new_stock = product["stock"] + payload.delta
        if new_stock < 0:
            raise HTTPException(
                status_code=409,
                detail={"message": "Insufficient stock", "available": product["stock"]},
            )
        product["stock"] = new_stock
        return {"id": product_id, "stock": new_stock}
