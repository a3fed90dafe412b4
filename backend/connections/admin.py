from django.contrib import admin
from .models import Connection


@admin.register(Connection)
class ConnectionAdmin(admin.ModelAdmin):
    list_display = ("id", "requester", "addressee", "status", "created_at", "updated_at")
    list_filter = ("status",)
    search_fields = ("requester__username", "addressee__username")
    readonly_fields = ("pair_key", "created_at", "updated_at")
