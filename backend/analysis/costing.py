"""
Cost engine for analysis records.

Stone prices and setting costs are in USD. Record totals are in TRY and are
derived from the gold price per gram and the USD/TRY rate:

    raw_material_cost  = grams * (1 + fire/100) * gold_price
    labor_cost         = labor (gold grams * gold_price | USD * usd_try)
                         + (polish + certificate) * usd_try
    total_setting_cost = sum(setting_cost) * usd_try
    total_stone_cost   = sum(total_stone_cost) * usd_try
    total_cost         = sum of the four
    profit_loss        = manufacturer_price * usd_try - total_cost
"""
from decimal import Decimal, ROUND_HALF_UP

from backend.core.utils import to_decimal
from backend.pricing.utils import (
    is_diamond, find_rapaport_price, find_rapaport_discount_rate,
    find_setting_rate, find_gemstone_price
)
from backend.rates.models import ExchangeRate

ZERO = Decimal('0')
ONE = Decimal('1')
HUNDRED = Decimal('100')
CENT = Decimal('0.01')
RATE_STEP = Decimal('0.0001')

# Stone fields the engine fills in
STONE_RESULT_FIELDS = ('setting_cost', 'rapaport_price', 'discount_percent', 'price_per_carat', 'total_stone_cost')


def money(value):
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_rates(gold_price=None, usd_try=None):
    """
    Return (gold_price_per_gram_try, usd_try) to compute with.

    Explicit values win. Missing ones come from the latest stored rate, or
    gold 0 and usd_try 1 when no rate is stored. A stored gold price in
    USD is converted with the USD/TRY rate in use.
    """
    gold = to_decimal(gold_price, default=None)
    if gold is not None and gold < 0:
        gold = None
    fx = to_decimal(usd_try, default=None)
    if fx is not None and fx <= 0:
        fx = None

    if gold is None or fx is None:
        rate = ExchangeRate.latest()
        if fx is None:
            fx = rate.usd_try if rate else ONE
        if gold is None:
            if rate is None:
                gold = ZERO
            elif rate.gold_24k_currency == 'USD':
                gold = rate.gold_24k_per_gram * fx
            else:
                gold = rate.gold_24k_per_gram

    return money(gold), fx.quantize(RATE_STEP, rounding=ROUND_HALF_UP)


def price_stone(stone):
    """
    Price a single stone given as a dict (stone_type, carat_size, quantity,
    shape, color, clarity, quality, discount_percent, price_per_carat).

    Diamonds with shape, color and clarity are priced from the Rapaport
    list; everything else uses the stone's own price per carat or the
    gemstone price table. Returns the fields in STONE_RESULT_FIELDS (USD).
    """
    carat = to_decimal(stone.get('carat_size'))
    quantity = to_decimal(stone.get('quantity'), default=ONE)
    if carat < 0:
        carat = ZERO
    stone_type = (stone.get('stone_type') or '').strip()
    diamond = is_diamond(stone_type)

    setting_cost = ZERO
    setting_rate = find_setting_rate(carat, 'diamond' if diamond else 'colored') if carat > 0 else None
    if setting_rate is not None:
        setting_cost = setting_rate.price_per_stone * quantity
        if setting_rate.pricing_type == 'per_carat':
            setting_cost *= carat

    shape = (stone.get('shape') or '').strip()
    color = (stone.get('color') or '').strip()
    clarity = (stone.get('clarity') or '').strip()
    discount = to_decimal(stone.get('discount_percent'), default=None)

    rapaport = None
    if diamond and shape and color and clarity and carat > 0:
        rapaport = find_rapaport_price(shape, carat, color, clarity)

    if rapaport is not None:
        if discount is None:
            discount_rate = find_rapaport_discount_rate(carat)
            discount = discount_rate.discount_percent if discount_rate else ZERO
        rapaport_price = rapaport.price_per_carat
        price_per_carat = rapaport_price * (ONE - discount / HUNDRED)
    else:
        rapaport_price = None
        price_per_carat = to_decimal(stone.get('price_per_carat'), default=None)
        if price_per_carat is None:
            gemstone = find_gemstone_price(stone_type, carat, stone.get('quality'))
            price_per_carat = gemstone.price_per_carat if gemstone else ZERO

    return {
        'setting_cost': money(setting_cost),
        'rapaport_price': rapaport_price,
        'discount_percent': discount,
        'price_per_carat': money(price_per_carat),
        'total_stone_cost': money(price_per_carat * carat * quantity),
    }


def price_stones(stones):
    """Return copies of the stone dicts with their computed prices merged in"""
    return [{**stone, **price_stone(stone)} for stone in stones]


def compute_totals(record, stones, gold_price, usd_try):
    """
    Compute the TRY totals of a record.

    `record` is a dict of the input fields, `stones` are priced stones
    (dicts or objects with setting_cost and total_stone_cost).
    """
    grams = to_decimal(record.get('total_grams'))
    fire = to_decimal(record.get('fire_percentage'))
    labor_amount = to_decimal(record.get('gold_labor_cost'))
    polish = to_decimal(record.get('polish_amount'))
    certificate = to_decimal(record.get('certificate_amount'))
    manufacturer_price = to_decimal(record.get('manufacturer_price'))

    raw_material = grams * (ONE + fire / HUNDRED) * gold_price

    if record.get('gold_labor_type') == 'gold':
        labor = labor_amount * gold_price
    else:
        labor = labor_amount * usd_try
    labor += (polish + certificate) * usd_try

    setting_usd = sum((to_decimal(_stone_value(s, 'setting_cost')) for s in stones), ZERO)
    stone_usd = sum((to_decimal(_stone_value(s, 'total_stone_cost')) for s in stones), ZERO)

    raw_material = money(raw_material)
    labor = money(labor)
    total_setting = money(setting_usd * usd_try)
    total_stone = money(stone_usd * usd_try)
    total = raw_material + labor + total_setting + total_stone
    manufacturer_price_try = money(manufacturer_price * usd_try)

    return {
        'raw_material_cost': raw_material,
        'labor_cost': labor,
        'total_setting_cost': total_setting,
        'total_stone_cost': total_stone,
        'total_cost': total,
        'manufacturer_price_try': manufacturer_price_try,
        'profit_loss': manufacturer_price_try - total,
        'gold_price_used': money(gold_price),
        'usd_try_used': usd_try.quantize(RATE_STEP, rounding=ROUND_HALF_UP),
    }


def _stone_value(stone, field):
    if isinstance(stone, dict):
        return stone.get(field)
    return getattr(stone, field, None)


def analyze(record, stones, gold_price=None, usd_try=None):
    """Price the stones and compute the record totals; returns (totals, priced_stones)"""
    gold, fx = resolve_rates(gold_price, usd_try)
    priced = price_stones(stones)
    return compute_totals(record, priced, gold, fx), priced
