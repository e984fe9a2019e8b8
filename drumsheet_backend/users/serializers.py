from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from users.models import Profile

User = get_user_model()


# ---------------- REGISTER ----------------
class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    preferred_locale = serializers.CharField(required=False, allow_blank=True, max_length=10)

    class Meta:
        model = User
        fields = [
            "email",
            "password",
            "name",
            "preferred_locale",
        ]

    def create(self, validated_data):
        # Storefront sign-up always yields a customer; admins are made in Django admin.
        locale = (validated_data.pop("preferred_locale", "") or "ko").strip()

        user = User.objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data.get("name", ""),
            role=User.ROLE_CUSTOMER,
        )
        Profile.objects.create(user=user, preferred_locale=locale)
        return user


# ---------------- LOGIN (INPUT ONLY) ----------------
class LoginSerializer(serializers.Serializer):
    """
    Input validation only.
    Authentication is handled in the view.
    """
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    credits = serializers.SerializerMethodField()
    preferred_locale = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "credits",
            "preferred_locale",
        ]

    def get_credits(self, obj) -> int:
        return Profile.for_user(obj).credits

    def get_preferred_locale(self, obj) -> str:
        return Profile.for_user(obj).preferred_locale


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=100)
    preferred_locale = serializers.CharField(required=False, max_length=10)
