from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import rooms.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.CharField(help_text="e.g., '101', 'A-12'", max_length=20, unique=True, validators=[django.core.validators.RegexValidator('^[A-Z0-9-]+$', 'Room number can only contain letters, numbers, and hyphens')])),
                ('floor', models.CharField(max_length=5, validators=[django.core.validators.RegexValidator('^[0-9]+$', 'Floor must be a number')])),
                ('capacity', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(6)])),
                ('occupied', models.PositiveSmallIntegerField(default=0)),
                ('room_type', models.CharField(choices=[('Standard', 'Standard'), ('Single', 'Single'), ('Double', 'Double'), ('Suite', 'Suite')], default='Standard', max_length=10)),
                ('status', models.CharField(choices=[('available', 'Available'), ('occupied', 'Occupied'), ('maintenance', 'Maintenance')], default='available', max_length=15)),
                ('monthly_rate', models.DecimalField(decimal_places=2, default=Decimal('5000'), max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('description', models.TextField(blank=True, default='')),
                ('amenities', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('current_occupants', models.ManyToManyField(blank=True, related_name='current_rooms', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Room',
                'verbose_name_plural': 'Rooms',
                'ordering': ['floor', 'number'],
                'indexes': [
                    models.Index(fields=['status'], name='rooms_status_idx'),
                    models.Index(fields=['floor', 'number'], name='rooms_floor_number_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('occupied__lte', models.F('capacity'))), name='room_occupied_within_capacity'),
                    models.CheckConstraint(condition=models.Q(('capacity__gte', 1), ('capacity__lte', 6)), name='room_capacity_in_range'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RoomImage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('image', models.FileField(upload_to=rooms.models.room_image_upload_to)),
                ('position', models.PositiveSmallIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='images', to='rooms.room')),
            ],
            options={
                'verbose_name': 'Room Image',
                'verbose_name_plural': 'Room Images',
                'ordering': ['position', 'id'],
            },
        ),
    ]
