from django.contrib import admin

from .models import SchoolClass, Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'grade', 'parent_name', 'contact', 'session', 'total_class_fees', 'back_fees')
    list_filter = ('session', 'grade')
    search_fields = ('id', 'name', 'parent_name', 'contact')


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ('name',)
    search_fields = ('name',)
