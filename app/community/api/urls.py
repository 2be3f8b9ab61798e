from django.urls import include, path
from rest_framework.routers import DefaultRouter

from app.community.api.views import CommunityViewSet

router = DefaultRouter()
router.register(r"communities", CommunityViewSet, basename="community")

urlpatterns = [
    path("", include(router.urls)),
]
