from django.contrib import admin

from apps.loans.models import (
    Loan,
    LoanAdjustment,
    PaymentReceipt,
    Receipt,
    ScheduledPayment,
)


class ScheduledPaymentInline(admin.TabularInline):
    model = ScheduledPayment
    extra = 0
    readonly_fields = ('payment_number', 'due_date', 'amount')
    can_delete = False


@admin.register(Loan)
class LoanAdmin(admin.ModelAdmin):
    list_display = (
        'loan_num', 'client', 'amount', 'interest_rate', 'num_payments',
        'due_monthly', 'status', 'loan_start_date',
    )
    list_filter = ('status', 'loan_start_date')
    search_fields = ('loan_num', 'client__first_name', 'client__last_name')
    readonly_fields = (
        'loan_num', 'due_monthly', 'initial_unearned_interest',
        'principal_per_period', 'created_at', 'updated_at',
    )
    raw_id_fields = ('client', 'approved_by', 'disbursed_by')
    inlines = [ScheduledPaymentInline]


class PaymentReceiptInline(admin.TabularInline):
    model = PaymentReceipt
    extra = 0
    readonly_fields = ('scheduled_payment', 'amount')
    can_delete = False


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ('receipt_num', 'loan', 'amount', 'receipt_date', 'received_by')
    list_filter = ('receipt_date',)
    search_fields = ('receipt_num', 'client__first_name', 'client__last_name')
    readonly_fields = ('created_at',)
    raw_id_fields = ('client', 'loan', 'received_by')
    inlines = [PaymentReceiptInline]

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(LoanAdjustment)
class LoanAdjustmentAdmin(admin.ModelAdmin):
    list_display = ('adjustment_num', 'loan', 'amount', 'created_by', 'created_at')
    raw_id_fields = ('loan', 'created_by')

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
