"""Tells what to show in the Django admin interface for offerings app"""

from django.contrib import admin
from .models import Offering, Party, ShowOfInterest, Membership, JoinRequest


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 0
    fields = ("user", "status", "contact_shared", "joined_at", "left_at")
    readonly_fields = ("joined_at", "left_at")


@admin.register(Offering)
class OfferingAdmin(admin.ModelAdmin):
    """All offerings, both kinds"""
    list_display = ['id', 'kind', 'host', 'party_size', 'member_count', 'is_active', 'expires_at', 'start_time', 'created_at']
    list_filter = ['kind', 'is_active', 'is_friends_only']
    search_fields = ['host__username', 'meetup_point', 'drop_off']
    readonly_fields = ['holds_host_slot', 'member_count', 'created_at', 'updated_at', 'cancelled_at']
    date_hierarchy = 'created_at'
    inlines = [MembershipInline]


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ("id", "host", "party_size", "member_count", "duration_minutes", "expires_at", "is_friends_only", "is_active")
    list_filter = ("is_active", "is_friends_only")
    search_fields = ("host__username", "meetup_point", "drop_off")
    readonly_fields = ("holds_host_slot", "member_count", "created_at", "updated_at", "cancelled_at")


@admin.register(ShowOfInterest)
class ShowOfInterestAdmin(admin.ModelAdmin):
    list_display = ("id", "host", "party_size", "member_count", "start_time", "expiry_timestamp", "is_active")
    list_filter = ("is_active",)
    search_fields = ("host__username", "meetup_point", "drop_off")
    readonly_fields = ("holds_host_slot", "member_count", "created_at", "updated_at", "cancelled_at")


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("offering", "user", "status", "contact_shared", "joined_at", "left_at")
    list_filter = ("status",)
    search_fields = ("offering__id", "user__username")


@admin.register(JoinRequest)
class JoinRequestAdmin(admin.ModelAdmin):
    list_display = ("offering", "user", "status", "created_at", "responded_at")
    list_filter = ("status",)
    search_fields = ("offering__id", "user__username")
    readonly_fields = ("created_at", "responded_at")
