"""
Line item factories shared by the test modules.
"""

from ordering_api.services.domain.aggregate import LineItem


def make_item(name="Fries", price_cents=5900, quantity=1, **kwargs) -> LineItem:
    """Regular menu item."""
    return LineItem(name=name, unit_price_cents=price_cents, quantity=quantity, **kwargs)


def make_wings(flavors=("BBQ", "Garlic"), quantity=2, price_cents=39900, **kwargs) -> LineItem:
    """The promotional unlimited wings item."""
    return LineItem(
        name="Unliwings",
        unit_price_cents=price_cents,
        quantity=quantity,
        is_promotional=True,
        selected_flavors=list(flavors),
        **kwargs,
    )


def order_payload(table_number, *items):
    """JSON body for POST /api/orders."""
    return {"table_number": table_number, "items": list(items)}


def fries_json(quantity=1, price="59.00"):
    return {"name": "Fries", "price": price, "quantity": quantity, "category": "Sides"}


def wings_json(flavors=("BBQ", "Garlic"), quantity=2, price="399.00"):
    return {
        "name": "Unliwings",
        "price": price,
        "quantity": quantity,
        "is_promotional": True,
        "selected_flavors": list(flavors),
    }
