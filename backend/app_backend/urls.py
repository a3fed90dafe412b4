from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check), # Health check endpoint

    # Authentication endpoints (at /api/auth/)
    path('api/auth/', include('accounts.urls')),  # register, login, refresh, me

    # Parties and shows of interest (at /api/offerings/)
    path('api/offerings/', include('offerings.urls')),

    # Connections and username search (at /api/connections/)
    path('api/connections/', include('connections.urls')),

    # Ratings and reports (at /api/feedback/)
    path('api/feedback/', include('feedback.urls')),
]
