import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('loans', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Reconciliation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(help_text='Calendar day of the receipts closed.')),
                ('amount_expected', models.DecimalField(decimal_places=2, help_text='Sum of the receipts at close time.', max_digits=15)),
                ('amount_surrendered', models.DecimalField(decimal_places=2, help_text='Cash physically handed in.', max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('clerk', models.ForeignKey(help_text='Staff member who collected the receipts.', on_delete=django.db.models.deletion.PROTECT, related_name='reconciliations', to=settings.AUTH_USER_MODEL)),
                ('reconciled_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('receipts', models.ManyToManyField(blank=True, related_name='reconciliations', to='loans.receipt')),
            ],
            options={
                'db_table': 'reconciliations',
                'ordering': ['-date', 'clerk'],
                'indexes': [models.Index(fields=['clerk', 'date'], name='idx_reconciliation_clerk_date')],
            },
        ),
    ]
