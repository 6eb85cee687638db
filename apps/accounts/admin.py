from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for the email-based user model (no username field)."""

    list_display = ['email', 'display_name', 'is_active', 'is_staff', 'created_at', 'last_login']
    list_filter = ['is_active', 'is_staff', 'is_superuser', 'created_at']
    search_fields = ['email', 'display_name']
    ordering = ['-created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Password reset', {
            'fields': ('reset_token', 'reset_token_created_at'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login', 'reset_token_created_at']
    filter_horizontal = ['groups', 'user_permissions']

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Deactivate selected users (superusers are skipped)."""
        count = queryset.filter(is_superuser=False).update(is_active=False)
        self.message_user(request, f'Deactivated {count} user(s).')

    actions = ['deactivate_users']
