from django.contrib import admin

from orders.models import Order, OrderItem, PaymentTransaction, Purchase


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("drum_sheet", "sheet_title", "price")


class PaymentTransactionInline(admin.TabularInline):
    model = PaymentTransaction
    extra = 0
    readonly_fields = ("provider", "payment_method", "amount", "currency", "status", "pg_transaction_id")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "user",
        "total_amount",
        "status",
        "payment_status",
        "payment_method",
        "expected_completion_date",
        "created_at",
    )
    list_filter = ("status", "payment_status", "payment_method", "order_type")
    search_fields = ("order_number", "user__email", "transaction_id", "depositor_name")
    readonly_fields = ("order_number", "transaction_id", "raw_status", "payment_confirmed_at", "metadata")
    inlines = [OrderItemInline, PaymentTransactionInline]


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ("user", "drum_sheet", "order", "price_paid", "created_at")
    search_fields = ("user__email", "drum_sheet__title")
