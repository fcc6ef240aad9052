from django.contrib import admin

from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('id', 'transaction_type', 'payment_status', 'amount', 'payer', 'payee', 'created_at')
    list_filter = ('transaction_type', 'payment_status')
    search_fields = ('description', 'payer__email', 'payee__email')
    readonly_fields = ('created_at',)
