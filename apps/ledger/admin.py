from django.contrib import admin

from apps.ledger.models import Account, Transaction


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ('account_num', 'name', 'account_type')
    list_filter = ('account_type',)
    search_fields = ('name', 'account_num')
    readonly_fields = ('account_num', 'created_at')


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'date', 'activity_type', 'activity_id', 'amount',
        'debit_account', 'credit_account',
    )
    list_filter = ('activity_type', 'date')
    search_fields = ('activity_id',)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
