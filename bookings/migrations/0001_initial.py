from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('token_number', models.CharField(db_index=True, max_length=20)),
                ('customer_name', models.CharField(max_length=255)),
                ('phone_number', models.CharField(blank=True, max_length=50)),
                ('gender', models.CharField(blank=True, choices=[('Male', 'Male'), ('Female', 'Female')], max_length=10)),
                ('age', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('address', models.CharField(blank=True, max_length=255)),
                ('number_of_persons', models.PositiveIntegerField(default=1)),
                ('date_english', models.DateField()),
                ('date_nepali', models.CharField(max_length=50)),
                ('date_nepali_exact', models.BooleanField(default=True)),
                ('game_type', models.CharField(choices=[('Playzone', 'Playzone'), ('Skatepark', 'Skatepark')], max_length=20)),
                ('playzone_package', models.CharField(blank=True, choices=[('1hr', '1 Hour'), ('unlimited', 'Unlimited')], max_length=20)),
                ('skatepark_base_package', models.CharField(blank=True, choices=[('30min', 'Half Hour'), ('1hr', '1 Hour')], max_length=20)),
                ('skatepark_extra_hours', models.PositiveIntegerField(blank=True, null=True)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Confirmed', 'Confirmed'), ('Completed', 'Completed')], db_index=True, default='Pending', max_length=20)),
                ('start_time', models.DateTimeField(blank=True, null=True)),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('actual_duration_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'bookings_booking',
                'ordering': ['-created_at'],
            },
        ),
    ]
