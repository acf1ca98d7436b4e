"""Static product list served by ``GET /api/products``."""
from typing import List

from models.api import Product

PRODUCTS: List[Product] = [
    Product(name="Organic Seed Starter Kit", price=299, description="Contains 10 varieties"),
    Product(name="Vermicompost 5kg", price=199, description="Premium worm castings"),
    Product(name="Neem Oil Spray 500ml", price=149, description="Natural pest control"),
    Product(name="pH Testing Kit", price=249, description="Test soil pH accurately"),
]


def list_products() -> List[Product]:
    return list(PRODUCTS)
