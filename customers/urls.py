from django.urls import path
from . import views

urlpatterns = [
    path('phone/<str:phone>/', views.customer_by_phone, name='customer_by_phone'),
    path('find-or-create/', views.find_or_create, name='customer_find_or_create'),
]
