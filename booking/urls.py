from django.urls import path
from . import views

urlpatterns = [
    # Корты
    path('courts/', views.courts_list, name='courts_list'),
    path('courts/<int:court_id>/', views.court_detail, name='court_detail'),

    # Цены
    path('pricing/calculate/', views.calculate_price, name='calculate_price'),
    path('pricing/current/', views.current_pricing, name='current_pricing'),

    # Бронирования
    path('bookings/', views.create_booking, name='create_booking'),
    path('bookings/check-availability/', views.check_availability, name='check_availability'),
    path('bookings/slots/', views.available_slots, name='available_slots'),
    path('bookings/<int:booking_id>/', views.booking_detail, name='booking_detail'),
    path('bookings/<int:booking_id>/cancel/', views.cancel_booking, name='cancel_booking'),
]
