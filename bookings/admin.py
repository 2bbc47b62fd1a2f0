from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['token_number', 'customer_name', 'game_type', 'package_display', 'date_english', 'date_nepali', 'status', 'price_display', 'created_at']
    list_filter = ['status', 'game_type', 'date_english', 'created_at']
    search_fields = ['token_number', 'customer_name', 'phone_number', 'address']
    readonly_fields = ['token_number', 'date_nepali', 'date_nepali_exact', 'price', 'created_at', 'updated_at']

    def package_display(self, obj):
        return obj.package_description()
    package_display.short_description = 'Package'

    def price_display(self, obj):
        return f"Rs. {obj.price:.2f}"
    price_display.short_description = 'Price'
