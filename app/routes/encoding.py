from decimal import Decimal

from fastapi.encoders import jsonable_encoder

from app.services.ledger import quantize_money


def money_json(data):
    """JSON-ready copy of data with every Decimal as an exact cents string ("1225.00")."""
    return jsonable_encoder(data, custom_encoder={Decimal: lambda v: str(quantize_money(v))})
