import datetime
import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.core.validators


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Company',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255, validators=[django.core.validators.MinLengthValidator(2)])),
                ('cnpj', models.CharField(max_length=14, validators=[apps.core.validators.cnpj_validator])),
                ('regime_type', models.CharField(choices=[('MEI', 'MEI'), ('SIMPLES_NACIONAL', 'Simples Nacional')], default='MEI', max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=11, validators=[apps.core.validators.phone_validator])),
                ('contact_person', models.CharField(blank=True, max_length=255)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('contact_phone', models.CharField(blank=True, max_length=11, validators=[apps.core.validators.phone_validator])),
                ('boleto_day', models.PositiveSmallIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(31)])),
                ('boleto_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('is_active', models.BooleanField(default=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='companies', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'companies',
                'db_table': 'companies',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', 'deleted_at'], name='companies_user_deleted_idx'),
                    models.Index(fields=['cnpj'], name='companies_cnpj_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='MonthlyFee',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('year', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(2000), django.core.validators.MaxValueValidator(2100)])),
                ('month', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(12)])),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('due_date', models.DateField()),
                ('status', models.CharField(choices=[('pendente', 'Pendente'), ('pago', 'Pago')], default='pendente', max_length=10)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='monthly_fees', to='companies.company')),
            ],
            options={
                'db_table': 'company_monthly_fees',
                'ordering': ['year', 'month'],
                'constraints': [
                    models.UniqueConstraint(fields=('company', 'year', 'month'), name='unique_company_fee_month'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CompanyBoleto',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('boleto_number', models.CharField(max_length=64, unique=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('due_date', models.DateField()),
                ('issue_date', models.DateField(default=django.utils.timezone.localdate)),
                ('status', models.CharField(choices=[('pending', 'Pendente'), ('sent', 'Enviado'), ('paid', 'Pago'), ('cancelled', 'Cancelado'), ('overdue', 'Vencido')], default='pending', max_length=10)),
                ('payment_date', models.DateField(blank=True, null=True)),
                ('sent_date', models.DateTimeField(blank=True, null=True)),
                ('sent_to_email', models.EmailField(blank=True, max_length=254)),
                ('notes', models.TextField(blank=True)),
                ('external_id', models.CharField(blank=True, db_index=True, max_length=64)),
                ('barcode', models.CharField(blank=True, max_length=64)),
                ('digitable_line', models.CharField(blank=True, max_length=64)),
                ('pdf_url', models.URLField(blank=True, max_length=500)),
                ('pix_emv', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='boletos', to='companies.company')),
                ('monthly_fee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='boletos', to='companies.monthlyfee')),
            ],
            options={
                'db_table': 'company_boletos',
                'ordering': ['-due_date'],
                'indexes': [
                    models.Index(fields=['company', 'status'], name='boletos_company_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BoletoSchedule',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('schedule_day', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(31)])),
                ('schedule_time', models.TimeField(default=datetime.time(8, 0))),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='boleto_schedule', to='companies.company')),
            ],
            options={
                'db_table': 'boleto_schedules',
            },
        ),
    ]
