from django.contrib import admin

from apps.reconciliation.models import Reconciliation


@admin.register(Reconciliation)
class ReconciliationAdmin(admin.ModelAdmin):
    list_display = (
        'date', 'clerk', 'amount_expected', 'amount_surrendered',
        'variance', 'reconciled_by',
    )
    list_filter = ('date',)
    raw_id_fields = ('clerk', 'reconciled_by', 'receipts')
    readonly_fields = ('amount_expected', 'created_at')

    def has_delete_permission(self, request, obj=None):
        return False
