from django.apps import AppConfig


class RecycleBinConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core.recycle_bin'
    label = 'recycle_bin'
