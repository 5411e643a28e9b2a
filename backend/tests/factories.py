# backend/tests/factories.py

# Raw platform payloads, shaped like the WooCommerce REST API answers them.


def make_product(product_id=1, **overrides):
    """A raw product as returned by the platform's products endpoint."""
    product = {
        "id": product_id,
        "name": f"Melhfa {product_id}",
        "slug": f"melhfa-{product_id}",
        "permalink": f"https://shop.test/produit/melhfa-{product_id}",
        "price": "10000",
        "regular_price": "10000",
        "sale_price": "",
        "on_sale": False,
        "featured": False,
        "stock_status": "instock",
        "stock_quantity": 5,
        "categories": [{"id": 15, "name": "Voiles", "slug": "voiles"}],
        "images": [{"id": 7, "src": f"https://shop.test/img/{product_id}.jpg", "alt": ""}],
        "attributes": [{"id": 1, "name": "Couleur", "options": ["Noir", "Bleu"]}],
        "date_created": "2024-05-01T10:00:00",
    }
    product.update(overrides)
    return product


def make_category(category_id, slug, count=3, **overrides):
    category = {
        "id": category_id,
        "name": slug.replace("-", " ").title(),
        "slug": slug,
        "parent": 0,
        "description": "",
        "display": "default",
        "image": None,
        "menu_order": 0,
        "count": count,
    }
    category.update(overrides)
    return category
