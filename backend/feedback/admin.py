from django.contrib import admin
from .models import Rating, Report


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ("id", "rater", "rated_user", "offering", "score", "created_at")
    list_filter = ("score",)
    search_fields = ("rater__username", "rated_user__username")


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ("id", "reporter", "reported_user", "reason", "status", "created_at")
    list_filter = ("reason", "status")
    list_editable = ("status",)
    search_fields = ("reporter__username", "reported_user__username", "details")
