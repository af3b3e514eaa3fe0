import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('clients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Loan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('loan_num', models.PositiveBigIntegerField(help_text='Sequential loan number.', unique=True)),
                ('amount', models.DecimalField(decimal_places=2, help_text='Principal lent.', max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('interest_rate', models.DecimalField(decimal_places=2, help_text='Flat interest rate per period (percentage).', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('num_payments', models.PositiveIntegerField(help_text='Number of monthly payments.', validators=[django.core.validators.MinValueValidator(1)])),
                ('due_monthly', models.DecimalField(decimal_places=2, help_text='Level payment due each period.', max_digits=15)),
                ('initial_unearned_interest', models.DecimalField(decimal_places=2, help_text='Total scheduled payments less principal.', max_digits=15)),
                ('principal_per_period', models.DecimalField(decimal_places=2, help_text='Pure-principal share of one full period payment.', max_digits=15)),
                ('status', models.CharField(choices=[('UNDISBURSED', 'Undisbursed'), ('ACTIVE', 'Active'), ('PAID', 'Paid'), ('CANCELLED', 'Cancelled'), ('DEFAULTED', 'Defaulted')], db_index=True, default='UNDISBURSED', max_length=20)),
                ('loan_start_date', models.DateField()),
                ('actual_disbursement_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='approved_loans', to=settings.AUTH_USER_MODEL)),
                ('client', models.ForeignKey(help_text='The borrower.', on_delete=django.db.models.deletion.PROTECT, related_name='loans', to='clients.client')),
                ('disbursed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='disbursed_loans', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'loans',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['client', 'status'], name='idx_loan_client_status')],
            },
        ),
        migrations.CreateModel(
            name='ScheduledPayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_number', models.PositiveIntegerField(help_text='1-based position in the schedule; allocation order.')),
                ('due_date', models.DateField()),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('loan', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='scheduled_payments', to='loans.loan')),
            ],
            options={
                'db_table': 'scheduled_payments',
                'ordering': ['loan', 'payment_number'],
                'constraints': [models.UniqueConstraint(fields=('loan', 'payment_number'), name='uniq_schedule_payment_number')],
            },
        ),
        migrations.CreateModel(
            name='Receipt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('receipt_num', models.PositiveBigIntegerField(unique=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('receipt_date', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='receipts', to='clients.client')),
                ('loan', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='receipts', to='loans.loan')),
                ('received_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='receipts_collected', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'receipts',
                'ordering': ['-receipt_date'],
                'indexes': [models.Index(fields=['received_by', 'receipt_date'], name='idx_receipt_clerk_date')],
            },
        ),
        migrations.CreateModel(
            name='PaymentReceipt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('receipt', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payment_receipts', to='loans.receipt')),
                ('scheduled_payment', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payment_receipts', to='loans.scheduledpayment')),
            ],
            options={
                'db_table': 'payment_receipts',
            },
        ),
        migrations.CreateModel(
            name='LoanAdjustment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('adjustment_num', models.PositiveBigIntegerField(unique=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='loan_adjustments', to=settings.AUTH_USER_MODEL)),
                ('loan', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='adjustments', to='loans.loan')),
            ],
            options={
                'db_table': 'loan_adjustments',
                'ordering': ['-created_at'],
            },
        ),
    ]
