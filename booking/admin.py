from django.contrib import admin, messages
from .models import BlockedTime, Booking, Zone
from .services import BookingService


@admin.register(Zone)
class ZoneAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'hourly_rate', 'min_duration', 'max_duration', 'active', 'is_walk_in']
    list_filter = ['active', 'is_walk_in']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['customer_name', 'zone', 'date', 'start_time', 'end_time', 'total_cost', 'status']
    list_filter = ['status', 'date', 'zone']
    search_fields = ['customer_name', 'customer_email', 'payment_id', 'zone__name']
    # Время и статус меняются только через сервис, вместе с ячейками учёта
    readonly_fields = ['zone', 'date', 'start_time', 'end_time', 'duration', 'status', 'created_at', 'updated_at']
    actions = ['cancel_bookings']

    def has_add_permission(self, request):
        return False

    @admin.action(description='Отменить выбранные бронирования')
    def cancel_bookings(self, request, queryset):
        cancelled = sum(1 for booking in queryset if BookingService.cancel_booking(booking))
        self.message_user(request, f'Отменено бронирований: {cancelled}', messages.SUCCESS)


@admin.register(BlockedTime)
class BlockedTimeAdmin(admin.ModelAdmin):
    list_display = ['zone', 'day_of_week', 'start_time', 'end_time', 'reason', 'active']
    list_filter = ['active', 'day_of_week', 'zone']
