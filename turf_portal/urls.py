from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

admin.site.site_header = "Turf Portal admin"

urlpatterns = [
    # Raw model admin for superusers; day-to-day moderation happens in /backoffice/
    path("dj-admin/", admin.site.urls),
    path("", include("turfs.urls")),
    path("accounts/", include("accounts.urls")),
    path("bookings/", include("bookings.urls")),
    path("backoffice/", include("backoffice.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
