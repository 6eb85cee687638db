from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator, MinLengthValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
import datetime
import uuid

from apps.core.validators import cnpj_validator, phone_validator


class RegimeType(models.TextChoices):
    MEI = 'MEI', 'MEI'
    SIMPLES_NACIONAL = 'SIMPLES_NACIONAL', 'Simples Nacional'


class FeeStatus(models.TextChoices):
    PENDENTE = 'pendente', 'Pendente'
    PAGO = 'pago', 'Pago'


# Derived, never stored: a pendente fee whose due date has passed
FEE_STATUS_ATRASADO = 'atrasado'


class BoletoStatus(models.TextChoices):
    PENDING = 'pending', 'Pendente'
    SENT = 'sent', 'Enviado'
    PAID = 'paid', 'Pago'
    CANCELLED = 'cancelled', 'Cancelado'
    OVERDUE = 'overdue', 'Vencido'


class CompanyQuerySet(models.QuerySet):

    def alive(self):
        """Companies that have not been soft-deleted."""
        return self.filter(deleted_at__isnull=True)


class Company(models.Model):
    """Client company billed a monthly fee (MEI or Simples Nacional)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='companies'
    )

    name = models.CharField(max_length=255, validators=[MinLengthValidator(2)])
    cnpj = models.CharField(max_length=14, validators=[cnpj_validator])
    regime_type = models.CharField(
        max_length=20,
        choices=RegimeType.choices,
        default=RegimeType.MEI
    )

    # Contact
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=11, blank=True, validators=[phone_validator])
    contact_person = models.CharField(max_length=255, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=11, blank=True, validators=[phone_validator])

    # Billing
    boleto_day = models.PositiveSmallIntegerField(
        default=5,
        validators=[MinValueValidator(1), MaxValueValidator(31)]
    )
    boleto_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CompanyQuerySet.as_manager()

    class Meta:
        db_table = 'companies'
        ordering = ['-created_at']
        verbose_name_plural = 'companies'
        indexes = [
            models.Index(fields=['user', 'deleted_at'], name='companies_user_deleted_idx'),
            models.Index(fields=['cnpj'], name='companies_cnpj_idx'),
        ]

    def __str__(self):
        return self.name

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.is_active = False
        self.save(update_fields=['deleted_at', 'is_active', 'updated_at'])

    @property
    def payer_email(self):
        return self.contact_email or self.email

    @property
    def payer_phone(self):
        return self.contact_phone or self.phone


class MonthlyFee(models.Model):
    """Fee owed by a company for one calendar month."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='monthly_fees'
    )
    year = models.PositiveSmallIntegerField(validators=[MinValueValidator(2000), MaxValueValidator(2100)])
    month = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(12)])
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    due_date = models.DateField()
    status = models.CharField(
        max_length=10,
        choices=FeeStatus.choices,
        default=FeeStatus.PENDENTE
    )
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'company_monthly_fees'
        ordering = ['year', 'month']
        constraints = [
            models.UniqueConstraint(fields=['company', 'year', 'month'], name='unique_company_fee_month'),
        ]

    def __str__(self):
        return f"{self.company.name} {self.month:02d}/{self.year}"

    def display_status(self, today: datetime.date = None):
        """Stored status, or ``atrasado`` for a pendente fee past its due date."""
        today = today or timezone.localdate()
        if self.status == FeeStatus.PENDENTE and self.due_date < today:
            return FEE_STATUS_ATRASADO
        return self.status


class CompanyBoleto(models.Model):
    """
    Bank slip issued to a company.

    Boletos are either recorded locally (number generated here) or issued
    through Cora, in which case ``external_id`` holds Cora's id and the
    barcode/PDF fields are filled from its response.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name='boletos'
    )
    monthly_fee = models.ForeignKey(
        MonthlyFee,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='boletos'
    )

    boleto_number = models.CharField(max_length=64, unique=True)
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    due_date = models.DateField()
    issue_date = models.DateField(default=timezone.localdate)
    status = models.CharField(
        max_length=10,
        choices=BoletoStatus.choices,
        default=BoletoStatus.PENDING
    )
    payment_date = models.DateField(null=True, blank=True)
    sent_date = models.DateTimeField(null=True, blank=True)
    sent_to_email = models.EmailField(blank=True)
    notes = models.TextField(blank=True)

    # Cora
    external_id = models.CharField(max_length=64, blank=True, db_index=True)
    barcode = models.CharField(max_length=64, blank=True)
    digitable_line = models.CharField(max_length=64, blank=True)
    pdf_url = models.URLField(max_length=500, blank=True)
    pix_emv = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'company_boletos'
        ordering = ['-due_date']
        indexes = [
            models.Index(fields=['company', 'status'], name='boletos_company_status_idx'),
        ]

    def __str__(self):
        return f"Boleto {self.boleto_number} ({self.get_status_display()})"

    @property
    def is_final(self):
        """Paid and cancelled boletos accept no further transitions."""
        return self.status in (BoletoStatus.PAID, BoletoStatus.CANCELLED)


class BoletoSchedule(models.Model):
    """Day and time of the month on which a company's boleto goes out."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    company = models.OneToOneField(
        Company,
        on_delete=models.CASCADE,
        related_name='boleto_schedule'
    )
    schedule_day = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(31)]
    )
    schedule_time = models.TimeField(default=datetime.time(8, 0))
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'boleto_schedules'

    def __str__(self):
        return f"{self.company.name}: dia {self.schedule_day} às {self.schedule_time:%H:%M}"
