from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import AuditLog, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    list_display = ('username', 'role', 'student_id', 'is_active')
    list_filter = ('role', 'is_active')
    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Role', {'fields': ('role', 'student')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'target_model', 'target_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('action', 'target_id', 'details')
