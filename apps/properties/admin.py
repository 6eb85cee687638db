from django.contrib import admin
from .models import RuralProperty


@admin.register(RuralProperty)
class RuralPropertyAdmin(admin.ModelAdmin):
    list_display = ['id', 'owner_name', 'farm_name', 'cpf', 'amount', 'due_date', 'payment_status', 'user']
    list_filter = ['payment_status', 'due_date']
    search_fields = ['owner_name', 'farm_name', 'cpf', 'address']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['user']
    date_hierarchy = 'due_date'
