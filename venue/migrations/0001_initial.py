from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='PriceSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('playzone_1hr', models.DecimalField(decimal_places=2, max_digits=10)),
                ('playzone_unlimited', models.DecimalField(decimal_places=2, max_digits=10)),
                ('skatepark_30min', models.DecimalField(decimal_places=2, max_digits=10)),
                ('skatepark_1hr', models.DecimalField(decimal_places=2, max_digits=10)),
                ('skatepark_extra_hour', models.DecimalField(decimal_places=2, max_digits=10)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'venue_price_settings',
                'verbose_name_plural': 'price settings',
            },
        ),
        migrations.CreateModel(
            name='StaffMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('counter', 'Counter')], db_index=True, default='counter', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'venue_staff_member',
                'ordering': ['name'],
            },
        ),
    ]
