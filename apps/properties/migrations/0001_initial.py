from decimal import Decimal

import django.core.validators
import django.db.models.deletion
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
            name='RuralProperty',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('owner_name', models.CharField(max_length=255, validators=[django.core.validators.MinLengthValidator(2, 'Proprietário deve ter pelo menos 2 caracteres')])),
                ('farm_name', models.CharField(blank=True, max_length=255, validators=[django.core.validators.MinLengthValidator(2, 'Sítio deve ter pelo menos 2 caracteres')])),
                ('address', models.CharField(blank=True, max_length=500, validators=[django.core.validators.MinLengthValidator(5, 'Endereço deve ter pelo menos 5 caracteres')])),
                ('cpf', models.CharField(blank=True, db_index=True, max_length=11, validators=[apps.core.validators.cpf_validator])),
                ('phone', models.CharField(blank=True, max_length=11, validators=[apps.core.validators.phone_validator])),
                ('ccir', models.CharField(blank=True, max_length=50)),
                ('itr', models.CharField(blank=True, max_length=50)),
                ('amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0.00'), 'Valor não pode ser negativo')])),
                ('due_date', models.DateField(blank=True, null=True)),
                ('payment_status', models.CharField(choices=[('PENDENTE', 'Pendente'), ('PAGO', 'Pago'), ('ATRASADO', 'Atrasado')], default='PENDENTE', max_length=10)),
                ('payment_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rural_properties', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'rural property',
                'verbose_name_plural': 'rural properties',
                'db_table': 'rural_properties',
                'ordering': ['id'],
                'indexes': [
                    models.Index(fields=['user', 'payment_status'], name='rural_prop_user_status_idx'),
                    models.Index(fields=['user', 'due_date'], name='rural_prop_user_due_idx'),
                ],
            },
        ),
    ]
