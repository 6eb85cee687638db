from django.contrib import admin
from .models import Company, MonthlyFee, CompanyBoleto, BoletoSchedule


class MonthlyFeeInline(admin.TabularInline):
    model = MonthlyFee
    extra = 0
    fields = ['year', 'month', 'amount', 'due_date', 'status', 'paid_at']


class BoletoScheduleInline(admin.StackedInline):
    model = BoletoSchedule
    extra = 0


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'cnpj', 'regime_type', 'boleto_day', 'boleto_amount', 'is_active', 'deleted_at', 'user']
    list_filter = ['regime_type', 'is_active']
    search_fields = ['name', 'cnpj', 'contact_person', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    inlines = [MonthlyFeeInline, BoletoScheduleInline]


@admin.register(CompanyBoleto)
class CompanyBoletoAdmin(admin.ModelAdmin):
    list_display = ['boleto_number', 'company', 'amount', 'due_date', 'status', 'payment_date', 'external_id']
    list_filter = ['status', 'due_date']
    search_fields = ['boleto_number', 'external_id', 'company__name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['company', 'monthly_fee']
    date_hierarchy = 'due_date'
