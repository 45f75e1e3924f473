from django.contrib import admin

from .models import Booking, BookingHistory, Court, PricingRule
from .services import BookingService


@admin.register(Court)
class CourtAdmin(admin.ModelAdmin):
    list_display = ['name', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name']


@admin.register(PricingRule)
class PricingRuleAdmin(admin.ModelAdmin):
    list_display = ['day_type', 'time_slot', 'price_per_hour', 'is_active']
    list_filter = ['day_type', 'time_slot', 'is_active']


class BookingHistoryInline(admin.TabularInline):
    model = BookingHistory
    extra = 0
    can_delete = False
    readonly_fields = ['action', 'changes', 'comment', 'created_at']

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """
    Бронирования только для просмотра

    Создание, смена времени, статуса и оплаты идут через BookingService
    (API менеджера), иначе ячейки BookingSlot разойдутся с бронированием.
    Здесь можно править только заметки.
    """
    list_display = ['customer', 'court', 'booking_date', 'start_time', 'end_time', 'status', 'payment_status', 'final_price']
    list_filter = ['status', 'payment_status', 'booking_date']
    search_fields = ['customer__name', 'customer__phone', 'court__name']
    readonly_fields = [
        'court', 'customer', 'booking_date', 'start_time', 'end_time',
        'starts_at', 'ends_at', 'duration_hours', 'status', 'pricing_breakdown',
        'total_price', 'discount_amount', 'final_price',
        'payment_status', 'amount_paid', 'payment_method', 'payment_reference',
        'created_by',
    ]
    inlines = [BookingHistoryInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        if 'notes' in form.changed_data:
            BookingService.update_notes(obj.pk, obj.notes)
