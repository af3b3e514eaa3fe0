import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Account',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Account name; engines resolve their accounts by name.', max_length=100, unique=True)),
                ('account_num', models.CharField(help_text='Account number, sequential within the account type.', max_length=10, unique=True)),
                ('account_type', models.CharField(choices=[('CASH', 'Cash'), ('OTHER_ASSET', 'Other asset'), ('LIABILITY', 'Liability'), ('REVENUE', 'Revenue'), ('EXPENSE', 'Expense')], db_index=True, max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'ledger_accounts',
                'ordering': ['account_num'],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('activity_type', models.CharField(choices=[('DISBURSEMENT', 'Disbursement'), ('RECEIPT', 'Receipt'), ('ADJUSTMENT', 'Adjustment'), ('RECONCILIATION', 'Reconciliation'), ('TRANSFER', 'Transfer')], db_index=True, max_length=20)),
                ('activity_id', models.CharField(db_index=True, help_text='Primary key of the business record that caused the entry.', max_length=64)),
                ('date', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('credit_account', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='credits', to='ledger.account')),
                ('debit_account', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='debits', to='ledger.account')),
            ],
            options={
                'db_table': 'ledger_transactions',
                'ordering': ['date', 'id'],
                'indexes': [models.Index(fields=['activity_type', 'activity_id'], name='idx_txn_activity')],
            },
        ),
    ]
