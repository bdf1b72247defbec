"""
Rapaport price list ingestion.

CSV layout (first non-blank line is a header and is skipped):

    shape,low_carat,high_carat,color,clarity,price_per_carat
    Round,0.30,0.39,D,IF,5200
"""
import csv
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction

from backend.core.cache_signals import suspend_cache_signals
from backend.core.cache_utils import invalidate_dashboard_cache
from backend.core.utils import to_decimal
from .models import RapaportPrice

logger = logging.getLogger('backend.pricing')

MIN_COLUMNS = 6
CARAT_LIMIT = Decimal('9999.99')
PRICE_LIMIT = Decimal('99999999.99')
CENT = Decimal('0.01')

# Accepted key spellings for JSON uploads
FIELD_ALIASES = {
    'shape': ('shape',),
    'low_carat': ('low_carat', 'lowCarat'),
    'high_carat': ('high_carat', 'highCarat'),
    'color': ('color',),
    'clarity': ('clarity',),
    'price_per_carat': ('price_per_carat', 'pricePerCarat'),
}


class RapaportImportError(Exception):
    """Raised when an upload contains no usable rows"""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


def _pick(entry, field):
    for key in FIELD_ALIASES[field]:
        if key in entry and entry[key] not in (None, ''):
            return entry[key]
    return None


def clean_price_row(entry):
    """
    Validate one price entry (dict) and return (row, error).

    `row` is a dict ready for RapaportPrice(**row); `error` is a message
    when the entry is rejected.
    """
    shape = str(_pick(entry, 'shape') or '').strip()
    color = str(_pick(entry, 'color') or '').strip().upper()
    clarity = str(_pick(entry, 'clarity') or '').strip().upper()
    if not shape or not color or not clarity:
        return None, 'shape, color and clarity are required'

    low = to_decimal(_pick(entry, 'low_carat'), default=None)
    high = to_decimal(_pick(entry, 'high_carat'), default=None)
    price = to_decimal(_pick(entry, 'price_per_carat'), default=None)
    if low is None or high is None or price is None:
        return None, 'low_carat, high_carat and price_per_carat must be numbers'
    if low < 0 or high < 0 or price < 0:
        return None, 'values must not be negative'
    if low > high:
        return None, 'low_carat is greater than high_carat'
    if high > CARAT_LIMIT or price > PRICE_LIMIT:
        return None, 'value out of range'

    return {
        'shape': shape[:1].upper() + shape[1:].lower(),
        'low_carat': low.quantize(CENT, rounding=ROUND_HALF_UP),
        'high_carat': high.quantize(CENT, rounding=ROUND_HALF_UP),
        'color': color,
        'clarity': clarity,
        'price_per_carat': price.quantize(CENT, rounding=ROUND_HALF_UP),
    }, None


def parse_rapaport_csv(text):
    """
    Parse CSV text into price rows.

    Returns (rows, errors, skipped) where errors is a list of
    {'line': n, 'error': message} and skipped counts short rows.
    """
    rows = []
    errors = []
    skipped = 0
    header_seen = False

    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        if not header_seen:
            header_seen = True
            continue

        cols = [c.strip() for c in next(csv.reader([line]))]
        if len(cols) < MIN_COLUMNS:
            skipped += 1
            continue

        entry = dict(zip(('shape', 'low_carat', 'high_carat', 'color', 'clarity', 'price_per_carat'), cols))
        row, error = clean_price_row(entry)
        if error:
            errors.append({'line': line_number, 'error': error})
            continue
        rows.append(row)

    return rows, errors, skipped


def clean_price_entries(entries):
    """Validate JSON entries; returns (rows, errors) with 1-based positions"""
    rows = []
    errors = []
    for position, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            errors.append({'line': position, 'error': 'entry must be an object'})
            continue
        row, error = clean_price_row(entry)
        if error:
            errors.append({'line': position, 'error': error})
            continue
        rows.append(row)
    return rows, errors


def import_price_rows(rows, clear_existing=False):
    """
    Store validated rows, optionally replacing the whole list.

    Returns (created, cleared). Nothing is touched when rows is empty.
    """
    if not rows:
        raise RapaportImportError('No valid Rapaport rows found')

    cleared = 0
    with transaction.atomic(), suspend_cache_signals():
        if clear_existing:
            cleared = RapaportPrice.objects.count()
            RapaportPrice.objects.all().delete()
        RapaportPrice.objects.bulk_create([RapaportPrice(**row) for row in rows], batch_size=1000)

    invalidate_dashboard_cache()
    logger.info(f"Imported {len(rows)} Rapaport prices (cleared {cleared})")
    return len(rows), cleared


def clear_prices():
    """Delete the whole Rapaport list; returns the number of deleted rows"""
    with transaction.atomic(), suspend_cache_signals():
        deleted, _ = RapaportPrice.objects.all().delete()
    invalidate_dashboard_cache()
    logger.info(f"Cleared {deleted} Rapaport prices")
    return deleted
