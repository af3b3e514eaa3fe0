from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('first_name', models.CharField(help_text="Client's first name.", max_length=100)),
                ('last_name', models.CharField(help_text="Client's last name.", max_length=100)),
                ('phone_number', models.CharField(blank=True, db_index=True, help_text="Client's contact phone number.", max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'clients',
                'ordering': ['last_name', 'first_name'],
            },
        ),
    ]
