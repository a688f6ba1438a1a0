import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import apps.core.models.listing


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Listing',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('provider_id', models.UUIDField(db_index=True)),
                ('kind', models.CharField(choices=[('service', 'Service'), ('experience', 'Experience'), ('rental', 'Rental'), ('subscription', 'Subscription'), ('project', 'Project')], default='service', max_length=20)),
                ('title', models.CharField(max_length=255)),
                ('currency', models.CharField(default='GBP', max_length=3)),
                ('timezone', models.CharField(default='Europe/London', max_length=64)),
                ('booking_enabled', models.BooleanField(default=True)),
                ('auto_confirm', models.BooleanField(default=False)),
                ('advance_booking_days', models.PositiveIntegerField(default=30)),
                ('same_day_booking', models.BooleanField(default=True)),
                ('cancellation_hours', models.PositiveIntegerField(default=24)),
                ('working_hours', models.JSONField(blank=True, default=apps.core.models.listing.default_working_hours)),
                ('slot_minutes', models.PositiveIntegerField(default=60)),
                ('buffer_minutes', models.PositiveIntegerField(default=0)),
                ('base_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('service_options', models.JSONField(blank=True, default=list, help_text='[{name, duration_minutes, price}]')),
                ('break_times', models.JSONField(blank=True, default=list, help_text='[{start, end, title}]')),
                ('rate_unit', models.CharField(choices=[('hourly', 'Per Hour'), ('daily', 'Per Day'), ('weekly', 'Per Week'), ('monthly', 'Per Month')], default='daily', max_length=10)),
                ('hourly_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('daily_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('weekly_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('monthly_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('min_days', models.PositiveIntegerField(default=1)),
                ('max_days', models.PositiveIntegerField(blank=True, null=True)),
                ('billing_cycle', models.CharField(choices=[('weekly', 'Weekly'), ('monthly', 'Monthly'), ('quarterly', 'Quarterly'), ('yearly', 'Yearly')], default='monthly', max_length=10)),
                ('fixed_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'listings',
                'ordering': ['title'],
                'indexes': [models.Index(fields=['provider_id', 'kind'], name='listings_provide_2f1c7a_idx')],
            },
        ),
        migrations.CreateModel(
            name='AvailabilityPeriod',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('start_date', models.DateField(db_index=True)),
                ('end_date', models.DateField(db_index=True)),
                ('availability_type', models.CharField(choices=[('available', 'Available'), ('blocked', 'Blocked')], max_length=20)),
                ('reason', models.CharField(blank=True, default='', max_length=255)),
                ('declared_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('listing', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='availability_periods', to='core.listing')),
            ],
            options={
                'db_table': 'availability_periods',
                'ordering': ['declared_at'],
                'constraints': [models.CheckConstraint(condition=models.Q(end_date__gte=models.F('start_date')), name='valid_period_range')],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('booking_number', models.CharField(db_index=True, max_length=20, unique=True)),
                ('provider_id', models.UUIDField(db_index=True)),
                ('customer_id', models.UUIDField(blank=True, db_index=True, null=True)),
                ('guest_name', models.CharField(blank=True, default='', max_length=255)),
                ('guest_email', models.EmailField(blank=True, default='', max_length=254)),
                ('guest_phone', models.CharField(blank=True, default='', max_length=50)),
                ('service_name', models.CharField(blank=True, default='', max_length=255)),
                ('start_time', models.DateTimeField(db_index=True)),
                ('end_time', models.DateTimeField(db_index=True)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('duration_minutes', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled'), ('completed', 'Completed'), ('no_show', 'No Show')], db_index=True, default='pending', max_length=20)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('currency', models.CharField(default='GBP', max_length=3)),
                ('recurrence_group_id', models.UUIDField(blank=True, db_index=True, null=True)),
                ('recurrence_sequence', models.PositiveIntegerField(blank=True, null=True)),
                ('recurrence_pattern', models.CharField(blank=True, choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly')], max_length=10, null=True)),
                ('cancelled_by', models.CharField(blank=True, choices=[('customer', 'Customer'), ('provider', 'Provider'), ('system', 'System')], max_length=10, null=True)),
                ('cancellation_reason', models.TextField(blank=True, default='')),
                ('is_late_cancellation', models.BooleanField(default=False)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('listing', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='core.listing')),
            ],
            options={
                'db_table': 'bookings',
                'ordering': ['start_time'],
                'indexes': [
                    models.Index(fields=['listing', 'start_time', 'end_time'], name='bookings_listing_8e2d41_idx'),
                    models.Index(fields=['status', 'end_time'], name='bookings_status_5b7c90_idx'),
                    models.Index(fields=['customer_id', 'start_time'], name='bookings_custome_a41f3e_idx'),
                ],
                'constraints': [models.CheckConstraint(condition=models.Q(end_time__gt=models.F('start_time')), name='valid_booking_times')],
            },
        ),
    ]
