from django.conf import settings
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal

from apps.core.validators import cpf_validator, phone_validator


class PaymentStatus(models.TextChoices):
    PENDENTE = 'PENDENTE', 'Pendente'
    PAGO = 'PAGO', 'Pago'
    ATRASADO = 'ATRASADO', 'Atrasado'


class RuralProperty(models.Model):
    """
    A rural property (imóvel rural) whose yearly fee is tracked for its owner.

    Records are private to the operator that created them.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='rural_properties'
    )

    owner_name = models.CharField(
        max_length=255,
        validators=[MinLengthValidator(2, 'Proprietário deve ter pelo menos 2 caracteres')]
    )
    farm_name = models.CharField(
        max_length=255,
        blank=True,
        validators=[MinLengthValidator(2, 'Sítio deve ter pelo menos 2 caracteres')]
    )
    address = models.CharField(
        max_length=500,
        blank=True,
        validators=[MinLengthValidator(5, 'Endereço deve ter pelo menos 5 caracteres')]
    )

    # Documents, digits only
    cpf = models.CharField(max_length=11, blank=True, db_index=True, validators=[cpf_validator])
    phone = models.CharField(max_length=11, blank=True, validators=[phone_validator])
    ccir = models.CharField(max_length=50, blank=True)
    itr = models.CharField(max_length=50, blank=True)

    # Payment
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'), 'Valor não pode ser negativo')]
    )
    due_date = models.DateField(null=True, blank=True)
    payment_status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDENTE
    )
    payment_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'rural_properties'
        ordering = ['id']
        verbose_name = 'rural property'
        verbose_name_plural = 'rural properties'
        indexes = [
            models.Index(fields=['user', 'payment_status'], name='rural_prop_user_status_idx'),
            models.Index(fields=['user', 'due_date'], name='rural_prop_user_due_idx'),
        ]

    def __str__(self):
        if self.farm_name:
            return f"{self.owner_name} - {self.farm_name}"
        return self.owner_name

    @property
    def is_overdue(self):
        """Unpaid and past its due date, whatever the stored status says."""
        return (
            self.payment_status != PaymentStatus.PAGO
            and self.due_date is not None
            and self.due_date < timezone.localdate()
        )
