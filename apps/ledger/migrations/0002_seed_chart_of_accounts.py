from django.conf import settings
from django.db import migrations

# (role, account type, account number)
DEFAULT_ACCOUNTS = [
    ('CASH_ON_HAND', 'CASH', 1000),
    ('UNRECONCILED_RECEIPTS', 'CASH', 1001),
    ('LOAN_CONTROL', 'OTHER_ASSET', 2000),
    ('UNEARNED_INTEREST', 'LIABILITY', 3000),
    ('INTEREST_INCOME', 'REVENUE', 4000),
    ('LOAN_ADJUSTMENTS', 'EXPENSE', 5000),
]


def seed_accounts(apps, schema_editor):
    Account = apps.get_model('ledger', 'Account')
    SequenceCounter = apps.get_model('core', 'SequenceCounter')

    last_numbers = {}
    for role, account_type, number in DEFAULT_ACCOUNTS:
        Account.objects.get_or_create(
            name=settings.LEDGER_ACCOUNTS[role],
            defaults={
                'account_num': str(number),
                'account_type': account_type,
            },
        )
        last_numbers[account_type] = max(number, last_numbers.get(account_type, 0))

    for account_type, number in last_numbers.items():
        SequenceCounter.objects.update_or_create(
            name=f'account:{account_type}',
            defaults={'last_value': number},
        )


def remove_accounts(apps, schema_editor):
    Account = apps.get_model('ledger', 'Account')
    names = [settings.LEDGER_ACCOUNTS[role] for role, _, _ in DEFAULT_ACCOUNTS]
    Account.objects.filter(name__in=names, debits__isnull=True, credits__isnull=True).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
        ('ledger', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_accounts, remove_accounts),
    ]
