# orders/filters.py

import django_filters

from orders.models import Order


class OrderAdminFilter(django_filters.FilterSet):
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lt")
    order_number = django_filters.CharFilter(field_name="order_number", lookup_expr="icontains")
    has_tracking = django_filters.BooleanFilter(method="filter_has_tracking")

    class Meta:
        model = Order
        fields = ["status", "cod_status", "payment_method"]

    def filter_has_tracking(self, queryset, name, value):
        if value:
            return queryset.filter(parcel__tracking__isnull=False)
        return queryset.exclude(parcel__tracking__isnull=False)
