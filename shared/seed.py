"""
Initial catalog used when the store has nothing saved yet.
"""

from shared.models import AppSettings, Category, Product


EMOJI_OPTIONS = ["🥤", "💊", "📦", "🍞", "🥛", "🧼", "💻", "📱", "🍬", "🍦"]

INITIAL_CATEGORIES: list[Category] = [
    Category(id="1", name="Boissons Gazeuses", icon="🥤"),
    Category(id="2", name="Produits Pharmaceutiques", icon="💊"),
    Category(id="3", name="Articles Divers", icon="📦"),
    Category(id="4", name="Alimentation", icon="🍞"),
]

INITIAL_PRODUCTS: list[Product] = [
    Product(id="p1", name="Coca-Cola 500ml", category_id="1", stock=50, sale_price=75, purchase_price=50, total_sales=120),
    Product(id="p2", name="Paracétamol 500mg", category_id="2", stock=100, sale_price=15, purchase_price=8, total_sales=250),
    Product(id="p3", name="Piles AA (paquet de 4)", category_id="3", stock=8, sale_price=150, purchase_price=100, total_sales=40),
    Product(id="p4", name="Pain de mie", category_id="4", stock=20, sale_price=120, purchase_price=90, total_sales=85),
    Product(id="p5", name="Sprite 1L", category_id="1", stock=0, sale_price=125, purchase_price=95, total_sales=60),
    Product(id="p6", name="Sirop pour la toux", category_id="2", stock=15, sale_price=250, purchase_price=180, total_sales=30),
]

DEFAULT_SETTINGS = AppSettings(notification_email="admin@example.com")
