from django.contrib import admin

from .models import FeeStructure, PaymentRecord


@admin.register(FeeStructure)
class FeeStructureAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'amount', 'due_date', 'session')
    list_filter = ('session',)
    search_fields = ('id', 'name')


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'student_id', 'fee_structure_id', 'amount_paid', 'date', 'method', 'session')
    list_filter = ('session', 'method', 'date')
    search_fields = ('id', 'student__name', 'student__id')
