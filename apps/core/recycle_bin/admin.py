from django.contrib import admin

from .models import TrashItem


@admin.register(TrashItem)
class TrashItemAdmin(admin.ModelAdmin):
    list_display = ('id', 'item_type', 'original_id', 'description', 'deleted_at')
    list_filter = ('item_type',)
    search_fields = ('original_id', 'description')
    readonly_fields = ('data',)
