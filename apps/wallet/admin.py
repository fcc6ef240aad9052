from django.contrib import admin

from .models import WalletRefundRequest, WalletTransaction


@admin.register(WalletRefundRequest)
class WalletRefundRequestAdmin(admin.ModelAdmin):
    list_display = ('reference_code', 'tasker', 'amount', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('reference_code', 'tasker__email')
    readonly_fields = ('reference_code', 'created_at', 'updated_at')


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ('user', 'transaction_type', 'amount', 'balance_after', 'created_at')
    list_filter = ('transaction_type',)
    search_fields = ('user__email', 'notes')

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
