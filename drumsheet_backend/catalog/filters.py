# catalog/filters.py

import django_filters
from django.db.models import Q

from catalog.models import DrumSheet


class DrumSheetFilter(django_filters.FilterSet):
    """
    Public catalog filters:
    - ?category=<slug>
    - ?sales_type=INSTANT|PREORDER
    - ?q=<text>  (title / artist)
    - ?free=true (price == 0)
    """

    category = django_filters.CharFilter(field_name="category__slug")
    sales_type = django_filters.ChoiceFilter(choices=DrumSheet.SALES_TYPE_CHOICES)
    q = django_filters.CharFilter(method="filter_search")
    free = django_filters.BooleanFilter(method="filter_free")

    class Meta:
        model = DrumSheet
        fields = ["category", "sales_type", "difficulty"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(title__icontains=value) | Q(artist__icontains=value))

    def filter_free(self, queryset, name, value):
        if value is True:
            return queryset.filter(price=0)
        if value is False:
            return queryset.filter(price__gt=0)
        return queryset
