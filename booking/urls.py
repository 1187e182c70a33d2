from django.urls import include, path

from . import views

urlpatterns = [
    path('zones/', views.zones_list, name='zones_list'),
    path('slots/', views.available_slots, name='available_slots'),
    path('check/', views.check_availability, name='check_availability'),
    path('create/', views.create_booking, name='create_booking'),
    path('coupon/', views.apply_coupon, name='apply_coupon'),

    # Админские API
    path('admin/', include('booking.admin_urls')),
]
