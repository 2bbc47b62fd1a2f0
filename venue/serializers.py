from rest_framework import serializers

from .models import PriceSettings, StaffMember


def _price_field():
    return serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)


class PriceSettingsSerializer(serializers.ModelSerializer):
    playzone_1hr = _price_field()
    playzone_unlimited = _price_field()
    skatepark_30min = _price_field()
    skatepark_1hr = _price_field()
    skatepark_extra_hour = _price_field()

    class Meta:
        model = PriceSettings
        fields = ['playzone_1hr', 'playzone_unlimited', 'skatepark_30min', 'skatepark_1hr', 'skatepark_extra_hour', 'updated_at']
        read_only_fields = ['updated_at']


class StaffMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = StaffMember
        fields = ['id', 'email', 'name', 'role', 'created_at']
        read_only_fields = ['id', 'created_at']


class StaffMemberUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = StaffMember
        fields = ['id', 'email', 'name', 'role', 'created_at']
        read_only_fields = ['id', 'email', 'created_at']
