from django.contrib import admin
from django.urls import path, include
from . import views

urlpatterns = [
    path('admin/', admin.site.urls),

    # Служебные проверки
    path('api/health/', views.health, name='health'),

    # Публичное API: корты, цены, бронирования
    path('api/', include('booking.urls')),

    # Клиенты
    path('api/customers/', include('customers.urls')),

    # Панель менеджера (только персонал)
    path('api/manager/', include('manager.urls')),
]
