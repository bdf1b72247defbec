import django_filters
from django.db.models import Q
from .models import GemstonePrice, RapaportPrice, StoneSettingRate


class StoneSettingRateFilter(django_filters.FilterSet):
    stone_category = django_filters.CharFilter(field_name='stone_category')
    pricing_type = django_filters.CharFilter(field_name='pricing_type')

    class Meta:
        model = StoneSettingRate
        fields = ['stone_category', 'pricing_type']


class GemstonePriceFilter(django_filters.FilterSet):
    stone_type = django_filters.CharFilter(field_name='stone_type', lookup_expr='iexact')
    quality = django_filters.CharFilter(field_name='quality', lookup_expr='iexact')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = GemstonePrice
        fields = ['stone_type', 'quality', 'search']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(stone_type__icontains=value) | Q(quality__icontains=value))


class RapaportPriceFilter(django_filters.FilterSet):
    shape = django_filters.CharFilter(field_name='shape', lookup_expr='iexact')
    color = django_filters.CharFilter(field_name='color', lookup_expr='iexact')
    clarity = django_filters.CharFilter(field_name='clarity', lookup_expr='iexact')
    carat = django_filters.NumberFilter(method='filter_carat')

    class Meta:
        model = RapaportPrice
        fields = ['shape', 'color', 'clarity', 'carat']

    def filter_carat(self, queryset, name, value):
        return queryset.filter(low_carat__lte=value, high_carat__gte=value)
