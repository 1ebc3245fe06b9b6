from datetime import datetime
from decimal import Decimal
from novastore import db

# ── Central threshold — change here, applies everywhere ──────────
LOW_STOCK_THRESHOLD = 5


class Category(db.Model):
    """A product category. Ids are assigned by the store, not the database."""
    __tablename__ = 'categories'

    id       = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name     = db.Column(db.String(120), nullable=False)
    position = db.Column(db.Integer, nullable=False, index=True)   # insertion order

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name}

    def __repr__(self):
        return f"<Category {self.id} {self.name!r}>"


class Product(db.Model):
    """A catalog product. Field order of to_dict() is the export order."""
    __tablename__ = 'products'

    id          = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name        = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    price       = db.Column(db.Numeric(10, 2), nullable=False)
    stock       = db.Column(db.Integer, nullable=False, default=0)
    category_id = db.Column(db.Integer, nullable=False, index=True)   # soft reference, no FK
    image_url   = db.Column(db.String(2048), nullable=False, default='')
    position    = db.Column(db.Integer, nullable=False, index=True)   # insertion order

    def to_dict(self) -> dict:
        return {
            'id':          self.id,
            'name':        self.name,
            'description': self.description,
            'price':       float(Decimal(str(self.price)).quantize(Decimal('0.01'))),
            'stock':       self.stock,
            'categoryId':  self.category_id,
            'imageUrl':    self.image_url,
        }

    @property
    def is_low_stock(self) -> bool:
        """True when stock is at or below LOW_STOCK_THRESHOLD."""
        return self.stock <= LOW_STOCK_THRESHOLD

    def __repr__(self):
        return f"<Product {self.id} {self.name!r}>"


class CatalogState(db.Model):
    """
    One row per seeded collection ('products', 'categories').
    No row means the collection is absent and must be seeded before use.
    """
    __tablename__ = 'catalog_state'

    collection = db.Column(db.String(40), primary_key=True)
    seeded_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<CatalogState {self.collection!r} {self.seeded_at:%Y-%m-%d %H:%M}>"
