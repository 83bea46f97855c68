"""Serializers for message threads and messages."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.properties.models import Property

from .models import Message, MessageThread

User = get_user_model()


class ParticipantSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="id", read_only=True)

    class Meta:
        model = User
        fields = ["user_id", "username", "full_name", "profile_image_url"]
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    thread_id = serializers.ReadOnlyField()
    sender_id = serializers.ReadOnlyField()
    recipient_id = serializers.ReadOnlyField()

    class Meta:
        model = Message
        fields = ["id", "thread_id", "sender_id", "recipient_id", "content", "is_read", "read_at", "created_at"]
        read_only_fields = fields


class MessageThreadSerializer(serializers.ModelSerializer):
    """Thread as listed for one of its participants."""

    guest_id = serializers.ReadOnlyField()
    host_id = serializers.ReadOnlyField()
    property_id = serializers.ReadOnlyField()
    property_title = serializers.ReadOnlyField(source="property.title")
    other_participant = serializers.SerializerMethodField()
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = MessageThread
        fields = [
            "id",
            "guest_id",
            "host_id",
            "property_id",
            "property_title",
            "other_participant",
            "unread_count",
            "last_message_at",
            "last_message_preview",
            "created_at",
        ]
        read_only_fields = fields

    def get_other_participant(self, obj: MessageThread):
        request = self.context.get("request")
        if request is None or not obj.has_participant(request.user.pk):
            return None
        return ParticipantSerializer(obj.other_participant(request.user)).data

    def get_unread_count(self, obj: MessageThread) -> int:
        annotated = getattr(obj, "unread_count", None)
        if annotated is not None:
            return annotated
        request = self.context.get("request")
        if request is None:
            return 0
        return obj.messages.filter(recipient_id=request.user.pk, is_read=False).count()


class MessageThreadDetailSerializer(MessageThreadSerializer):
    messages = MessageSerializer(many=True, read_only=True)

    class Meta(MessageThreadSerializer.Meta):
        fields = MessageThreadSerializer.Meta.fields + ["messages"]
        read_only_fields = fields


class MessageThreadCreateSerializer(serializers.Serializer):
    property_id = serializers.PrimaryKeyRelatedField(
        queryset=Property.objects.all(), required=False, allow_null=True
    )
    guest_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True))
    host_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True))

    def validate(self, attrs):  # type: ignore
        property_obj = attrs.get("property_id")
        if property_obj is not None and property_obj.host_id != attrs["host_id"].pk:
            raise serializers.ValidationError({"host_id": "The host does not own this property."})
        return attrs


class MessageCreateSerializer(serializers.Serializer):
    thread_id = serializers.IntegerField()
    content = serializers.CharField(max_length=5000, trim_whitespace=True)
