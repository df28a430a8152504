# shipping/serializers/status_check.py

from rest_framework import serializers

ACTION_CHECK_ALL = "check-all"
ACTION_CHECK_SINGLE = "check-single"
ACTION_STATS = "stats"


class StatusCheckCommandSerializer(serializers.Serializer):
    """
    Admin trigger for the courier status poller.
    check-single needs order_id.
    """

    action = serializers.ChoiceField(
        choices=[ACTION_CHECK_ALL, ACTION_CHECK_SINGLE, ACTION_STATS]
    )
    order_id = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if attrs["action"] == ACTION_CHECK_SINGLE and not attrs.get("order_id"):
            raise serializers.ValidationError(
                {"order_id": "This field is required for check-single."}
            )
        return attrs
