from django.contrib import admin
from .models import PriceSettings, StaffMember


@admin.register(PriceSettings)
class PriceSettingsAdmin(admin.ModelAdmin):
    list_display = ['id', 'playzone_1hr', 'playzone_unlimited', 'skatepark_30min', 'skatepark_1hr', 'skatepark_extra_hour', 'updated_at']
    readonly_fields = ['updated_at']

    fieldsets = (
        ('Playzone', {
            'fields': ('playzone_1hr', 'playzone_unlimited')
        }),
        ('Skatepark', {
            'fields': ('skatepark_30min', 'skatepark_1hr', 'skatepark_extra_hour')
        }),
        ('Timestamps', {
            'fields': ('updated_at',)
        }),
    )

    def has_add_permission(self, request):
        return not PriceSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StaffMember)
class StaffMemberAdmin(admin.ModelAdmin):
    list_display = ['email', 'name', 'role', 'created_at']
    list_filter = ['role', 'created_at']
    search_fields = ['email', 'name']
    readonly_fields = ['created_at', 'updated_at']
