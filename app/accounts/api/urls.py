from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from app.accounts.api.views import RegisterView, UserViewSet

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")

# users/me/standing/ vem da action ``standing`` do UserViewSet
urlpatterns = [
    path("register/", RegisterView.as_view(), name="accounts-register"),
    path("login/", TokenObtainPairView.as_view(), name="accounts-login"),
    path("refresh/", TokenRefreshView.as_view(), name="accounts-refresh"),
    path("", include(router.urls)),
]
