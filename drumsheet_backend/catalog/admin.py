from django.contrib import admin

from catalog.models import Category, Collection, DrumSheet


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "sort_order")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(DrumSheet)
class DrumSheetAdmin(admin.ModelAdmin):
    list_display = ("title", "artist", "price", "sales_type", "is_active", "created_at")
    list_filter = ("sales_type", "is_active", "category", "difficulty")
    search_fields = ("title", "artist", "slug")


@admin.register(Collection)
class CollectionAdmin(admin.ModelAdmin):
    list_display = ("title", "original_price", "sale_price", "is_active")
    search_fields = ("title",)
    filter_horizontal = ("sheets",)
