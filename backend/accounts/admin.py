from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from accounts.models import User


PROFILE_FIELDS = ("phone_number", "university", "show_university", "show_phone")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Riders, with the profile fields the ride engine reads"""

    list_display = ("username", "email", "university", "show_university", "show_phone", "is_active")
    list_filter = ("university", "show_university", "show_phone", "is_active", "is_staff")
    search_fields = ("username", "email", "phone_number", "university")
    ordering = ("username",)

    fieldsets = BaseUserAdmin.fieldsets + (
        ("Rider profile", {"fields": PROFILE_FIELDS}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Rider profile", {"fields": PROFILE_FIELDS}),
    )
