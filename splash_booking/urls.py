from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),

    # Бронирование - основное приложение
    path('booking/', include('booking.urls')),
]
