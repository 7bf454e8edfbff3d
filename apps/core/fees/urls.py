from django.urls import path

from .views import (
    fee_structure_create,
    fee_structure_list,
    payment_create,
    payment_delete,
    payment_list,
    payment_update,
)

urlpatterns = [
    path('structures/', fee_structure_list, name='fee_structure_list'),
    path('structures/add/', fee_structure_create, name='fee_structure_create'),

    path('payments/', payment_list, name='payment_list'),
    path('payments/add/', payment_create, name='payment_create'),
    path('payments/<str:payment_id>/edit/', payment_update, name='payment_update'),
    path('payments/<str:payment_id>/delete/', payment_delete, name='payment_delete'),
]
