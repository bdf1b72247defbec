import django_filters
from django.db.models import Q
from .models import AnalysisRecord


class AnalysisRecordFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    manufacturer = django_filters.NumberFilter(field_name='manufacturer_id')
    batch = django_filters.NumberFilter(field_name='batch_id')
    product_type = django_filters.CharFilter(field_name='product_type')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = AnalysisRecord
        fields = ['search', 'manufacturer', 'batch', 'product_type', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(product_code__icontains=value) | Q(manufacturer__name__icontains=value))
