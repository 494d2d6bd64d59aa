from rest_framework import serializers
from rest_framework.fields import empty
from rest_framework.utils import html

from core.constants import RoomType, RoomStatus, DefaultLimits
from .models import Room, RoomImage
from .services import parse_amenities


class ListOrStringField(serializers.Field):
    """
    A list that also arrives from multipart forms, either repeated
    keys, a JSON encoded list or a comma separated string.
    """

    def get_value(self, dictionary):
        if html.is_html_input(dictionary) and self.field_name in dictionary:
            values = dictionary.getlist(self.field_name)
            return values if len(values) > 1 else values[0]
        return dictionary.get(self.field_name, empty)

    def to_internal_value(self, data):
        return parse_amenities(data)

    def to_representation(self, value):
        return value


class ImageIdsField(ListOrStringField):
    def to_internal_value(self, data):
        try:
            return [int(value) for value in parse_amenities(data)]
        except (TypeError, ValueError):
            raise serializers.ValidationError("existing_images must be a list of image ids")


class RoomImageSerializer(serializers.ModelSerializer):
    url = serializers.SerializerMethodField()

    class Meta:
        model = RoomImage
        fields = ['id', 'url', 'position']

    def get_url(self, obj):
        return obj.image.url if obj.image else None


class RoomSerializer(serializers.ModelSerializer):
    """Serializer for Room"""
    images = RoomImageSerializer(many=True, read_only=True)
    available_slots = serializers.ReadOnlyField()
    current_occupants = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = [
            'id', 'number', 'floor', 'capacity', 'occupied', 'available_slots',
            'room_type', 'status', 'monthly_rate', 'description', 'amenities',
            'images', 'current_occupants', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_current_occupants(self, obj):
        return [{'id': user.id, 'name': user.name, 'email': user.email}
                for user in obj.current_occupants.all()]


class RoomListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list view"""
    images = RoomImageSerializer(many=True, read_only=True)
    available_slots = serializers.ReadOnlyField()

    class Meta:
        model = Room
        fields = [
            'id', 'number', 'floor', 'room_type', 'capacity', 'occupied',
            'available_slots', 'status', 'monthly_rate', 'images'
        ]
        read_only_fields = fields


class PublicRoomSerializer(serializers.ModelSerializer):
    """Fields visible without logging in"""
    images = RoomImageSerializer(many=True, read_only=True)

    class Meta:
        model = Room
        fields = [
            'id', 'number', 'floor', 'room_type', 'images', 'monthly_rate',
            'capacity', 'occupied', 'status', 'description', 'amenities'
        ]
        read_only_fields = fields


class RoomWriteSerializer(serializers.Serializer):
    """Input for create and update, handed to RoomService as a RoomDTO"""
    number = serializers.CharField(max_length=20, required=False)
    floor = serializers.CharField(max_length=5, required=False)
    capacity = serializers.IntegerField(required=False)
    room_type = serializers.ChoiceField(choices=RoomType.CHOICES, required=False)
    status = serializers.ChoiceField(choices=RoomStatus.CHOICES, required=False)
    monthly_rate = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    amenities = ListOrStringField(required=False)
    existing_images = ImageIdsField(required=False)

    def validate_capacity(self, value):
        if value < DefaultLimits.MIN_ROOM_CAPACITY or value > DefaultLimits.MAX_ROOM_CAPACITY:
            raise serializers.ValidationError(
                f"Capacity must be between {DefaultLimits.MIN_ROOM_CAPACITY} and {DefaultLimits.MAX_ROOM_CAPACITY}"
            )
        return value
