from django.contrib import admin

from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ('id', 'category', 'description', 'amount', 'date', 'session')
    list_filter = ('session', 'category', 'date')
    search_fields = ('id', 'description')
