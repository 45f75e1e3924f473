"""
Manager App URLs
"""

from django.urls import path
from . import views

app_name = 'manager'

urlpatterns = [
    # API - Bookings
    path('bookings/', views.api_bookings_list, name='api_bookings_list'),
    path('bookings/create/', views.api_booking_create, name='api_booking_create'),
    path('bookings/<int:booking_id>/', views.api_booking_detail, name='api_booking_detail'),
    path('bookings/<int:booking_id>/update/', views.api_booking_update, name='api_booking_update'),
    path('bookings/<int:booking_id>/status/', views.api_booking_status, name='api_booking_status'),
    path('bookings/<int:booking_id>/payment/', views.api_booking_payment, name='api_booking_payment'),
    path('bookings/<int:booking_id>/cancel/', views.api_booking_cancel, name='api_booking_cancel'),

    # API - Courts
    path('courts/', views.api_courts_list, name='api_courts_list'),
    path('courts/create/', views.api_court_create, name='api_court_create'),
    path('courts/<int:court_id>/update/', views.api_court_update, name='api_court_update'),
    path('courts/<int:court_id>/status/', views.api_court_status, name='api_court_status'),
    path('courts/<int:court_id>/delete/', views.api_court_delete, name='api_court_delete'),

    # API - Pricing
    path('pricing/', views.api_pricing_list, name='api_pricing_list'),
    path('pricing/create/', views.api_pricing_create, name='api_pricing_create'),
    path('pricing/initialize/', views.api_pricing_initialize, name='api_pricing_initialize'),
    path('pricing/<int:rule_id>/', views.api_pricing_detail, name='api_pricing_detail'),
    path('pricing/<int:rule_id>/update/', views.api_pricing_update, name='api_pricing_update'),
    path('pricing/<int:rule_id>/delete/', views.api_pricing_delete, name='api_pricing_delete'),

    # API - Customers
    path('customers/', views.api_customers_list, name='api_customers_list'),
]
