from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SequenceCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text="Sequence name, e.g. 'receipt' or 'account:CASH'.", max_length=50, unique=True)),
                ('last_value', models.PositiveBigIntegerField(help_text='Last number handed out.')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'sequence_counters',
            },
        ),
    ]
