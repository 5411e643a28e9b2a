# /storefront/services/pricing.py

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Union

from storefront.models.domain import Product

# Pure helpers for price display and sale detection. Platform prices arrive
# as decimal strings and are only converted to numbers here.

PLACEHOLDER_IMAGE = "/placeholder-product.jpg"
DEFAULT_SWATCH = "#CCCCCC"

# fr-FR groups thousands with a narrow no-break space
THOUSANDS_SEPARATOR = "\u202f"

COLOR_HEX = {
    "blanc": "#FFFFFF",
    "blanc-casse": "#F8F8FF",
    "blanc cassé": "#F8F8FF",
    "beige": "#F5F5DC",
    "crème": "#FFFDD0",
    "ivoire": "#FFFFF0",
    "noir": "#000000",
    "gris": "#808080",
    "bleu": "#0000FF",
    "bleu-marine": "#000080",
    "bleu marine": "#000080",
    "rouge": "#FF0000",
    "bordeaux": "#800020",
    "rose": "#FFC0CB",
    "vert": "#008000",
    "jaune": "#FFFF00",
    "orange": "#FFA500",
    "violet": "#800080",
    "marron": "#A52A2A",
    "dore": "#FFD700",
    "doré": "#FFD700",
    "argente": "#C0C0C0",
    "argenté": "#C0C0C0",
    "multicolore": "#FF6B6B",
}


def parse_price(value: Union[str, int, float, None]) -> Optional[float]:
    """Converts a platform price to a float, or None if it is empty or not a number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def format_price(price: Union[str, int, float, None], currency: str = "MRU") -> str:
    """
    Formats a price the way the storefront displays it, e.g. "12 500 MRU".
    Unparsable input renders as zero.
    """
    number = parse_price(price)
    if number is None:
        return f"0 {currency}"

    amount = Decimal(str(number)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer_part, _, fraction = f"{abs(amount):,.2f}".partition(".")
    integer_part = integer_part.replace(",", THOUSANDS_SEPARATOR)
    fraction = fraction.rstrip("0")
    body = f"{integer_part},{fraction}" if fraction else integer_part
    return f"{sign}{body} {currency}"


def is_on_sale(product: Product) -> bool:
    return product.on_sale is True and product.sale_price != ""


def get_discount_percentage(product: Product) -> int:
    """Rounded percentage saved on a sale product; 0 when it cannot be computed."""
    if not is_on_sale(product):
        return 0

    regular_price = parse_price(product.regular_price)
    sale_price = parse_price(product.sale_price)
    if regular_price is None or sale_price is None or regular_price == 0:
        return 0

    try:
        ratio = Decimal(str(regular_price - sale_price)) / Decimal(str(regular_price)) * 100
    except InvalidOperation:
        return 0
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def get_product_image(product: Product) -> str:
    return product.images[0].src if product.images else PLACEHOLDER_IMAGE


def get_product_images(product: Product) -> List[str]:
    return [image.src for image in product.images]


def get_color_hex(color_name: str) -> str:
    return COLOR_HEX.get(color_name.lower(), DEFAULT_SWATCH)
