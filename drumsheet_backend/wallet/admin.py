from django.contrib import admin

from wallet.models import CashTransaction


@admin.register(CashTransaction)
class CashTransactionAdmin(admin.ModelAdmin):
    list_display = ("user", "transaction_type", "amount", "bonus_amount", "balance_after", "created_at")
    list_filter = ("transaction_type",)
    search_fields = ("user__email", "description")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
