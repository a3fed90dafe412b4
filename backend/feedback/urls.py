from django.urls import path

from .views import SubmitRatingView, UserRatingsView, SubmitReportView, ReportReasonsView

app_name = "feedback"

urlpatterns = [
    path("ratings/", SubmitRatingView.as_view(), name="submit-rating"),
    path("ratings/<int:user_id>/", UserRatingsView.as_view(), name="user-ratings"),
    path("reports/", SubmitReportView.as_view(), name="submit-report"),
    path("reports/reasons/", ReportReasonsView.as_view(), name="report-reasons"),
]
