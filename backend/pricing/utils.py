"""Price table lookups used by the cost engine and the lookup endpoints"""
from django.db.models import DecimalField, ExpressionWrapper, F
from .constants import DIAMOND_KEYWORDS
from .models import StoneSettingRate, GemstonePrice, RapaportPrice, RapaportDiscountRate


def normalize_tr(text):
    """Lower-case text so that Turkish dotted/dotless I variants compare equal"""
    if not text:
        return ''
    return str(text).lower().replace('\u0307', '').replace('\u0131', 'i')


_DIAMOND_KEYWORDS = tuple(normalize_tr(k) for k in DIAMOND_KEYWORDS)


def is_diamond(stone_type):
    """True when the stone type names a diamond (elmas, diamond, pırlanta)"""
    value = normalize_tr(stone_type)
    return any(keyword in value for keyword in _DIAMOND_KEYWORDS)


def _with_range_width(queryset, low_field, high_field):
    return queryset.annotate(
        range_width=ExpressionWrapper(
            F(high_field) - F(low_field),
            output_field=DecimalField(max_digits=8, decimal_places=4)
        )
    )


def find_rapaport_price(shape, carat, color, clarity):
    """
    Rapaport entry for shape/color/clarity whose carat range contains `carat`.

    Bounds are inclusive. When ranges overlap the narrowest one wins, then
    the most recently uploaded. Returns None when nothing matches.
    """
    if not (shape and color and clarity) or carat is None:
        return None
    queryset = RapaportPrice.objects.filter(
        shape__iexact=shape.strip(),
        color__iexact=color.strip(),
        clarity__iexact=clarity.strip(),
        low_carat__lte=carat,
        high_carat__gte=carat,
    )
    return _with_range_width(queryset, 'low_carat', 'high_carat').order_by(
        'range_width', '-uploaded_at', '-id'
    ).first()


def find_rapaport_discount_rate(carat):
    """Discount rate whose carat range contains `carat`, narrowest range first"""
    if carat is None:
        return None
    queryset = RapaportDiscountRate.objects.filter(min_carat__lte=carat, max_carat__gte=carat)
    return _with_range_width(queryset, 'min_carat', 'max_carat').order_by('range_width', 'id').first()


def find_setting_rate(carat, stone_category='diamond'):
    """
    Setting rate for a stone of `carat`.

    Rates of the requested category are preferred; any rate whose range
    contains the carat is used otherwise.
    """
    if carat is None:
        return None
    in_range = StoneSettingRate.objects.filter(min_carat__lte=carat, max_carat__gte=carat).order_by('id')
    rate = in_range.filter(stone_category=stone_category).first()
    if rate is None:
        rate = in_range.first()
    return rate


def find_gemstone_price(stone_type, carat=None, quality=None):
    """
    Best gemstone price entry for a stone type.

    Entries whose carat range contains the carat come first, then entries
    with the requested quality, then entries without a quality. Entries
    with explicit carat bounds beat open-ended ones.
    """
    if not stone_type:
        return None
    candidates = list(GemstonePrice.objects.filter(stone_type__iexact=stone_type.strip()).order_by('id'))
    if not candidates:
        wanted = normalize_tr(stone_type.strip())
        candidates = [c for c in GemstonePrice.objects.order_by('id') if normalize_tr(c.stone_type) == wanted]
    if not candidates:
        return None

    wanted_quality = (quality or '').strip().lower()

    def rank(entry):
        in_range = carat is None or (
            (entry.min_carat is None or entry.min_carat <= carat) and
            (entry.max_carat is None or carat <= entry.max_carat)
        )
        if wanted_quality and entry.quality.lower() == wanted_quality:
            quality_rank = 0
        elif not entry.quality:
            quality_rank = 1
        else:
            quality_rank = 2
        bounded = 0 if (entry.min_carat is not None or entry.max_carat is not None) else 1
        return (0 if in_range else 1, quality_rank, bounded, entry.id)

    return min(candidates, key=rank)
