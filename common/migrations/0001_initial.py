from django.db import migrations, models

import common.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SystemSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_qr_code', models.FileField(blank=True, default='', upload_to=common.models.payment_qr_upload_to)),
                ('gcash_name', models.CharField(blank=True, default='', max_length=120)),
                ('gcash_number', models.CharField(blank=True, default='', max_length=20)),
                ('payment_instructions', models.TextField(blank=True, default='Please scan the QR code and upload your proof of payment.')),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'System Settings',
                'verbose_name_plural': 'System Settings',
            },
        ),
    ]
