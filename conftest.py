import pytest
from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from model_bakery import baker
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from app.accounts.models import User
from app.community.models import Community, CommunityMembership


def client_for(user: User) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def client_factory():
    """Cliente autenticado para qualquer usuário."""
    return client_for


@pytest.fixture
def user(db):
    """Fixture que cria um usuário autenticado."""
    return baker.make(User, email="test@example.com", name="Test User", role=User.Role.CLIENT)


@pytest.fixture
def authenticated_client(user: User) -> APIClient:
    return client_for(user)


@pytest.fixture
def admin_user(db) -> User:
    return baker.make(User, email="admin@example.com", name="Admin User", role=User.Role.ADMIN, is_staff=True)


@pytest.fixture
def admin_client(admin_user: User) -> APIClient:
    return client_for(admin_user)


@pytest.fixture
def trainer_user(db) -> User:
    return baker.make(User, email="trainer@example.com", name="Trainer User", role=User.Role.TRAINER)


@pytest.fixture
def member_user(db) -> User:
    return baker.make(User, email="member@example.com", name="Member User")


@pytest.fixture
def community(db, user):
    """Comunidade pública com o usuário de teste como membro."""
    community = baker.make(Community, name="Treino de Força", visibility=Community.Visibility.PUBLIC)
    baker.make(CommunityMembership, community=community, user=user, role=CommunityMembership.Role.MEMBER)
    return community


@pytest.fixture
def private_community(db, admin_user):
    community = baker.make(Community, name="Grupo Fechado", visibility=Community.Visibility.PRIVATE)
    baker.make(CommunityMembership, community=community, user=admin_user, role=CommunityMembership.Role.ADMIN)
    return community


@pytest.fixture
def anonymous_user():
    """Fixture que retorna um usuário anônimo."""
    return AnonymousUser()


@pytest.fixture(autouse=True)
def use_in_memory_channel_layer(settings):
    """Sobrescreve CHANNEL_LAYERS para usar InMemoryChannelLayer nos testes."""
    settings.CHANNEL_LAYERS = {
        "default": {
            "BACKEND": "channels.layers.InMemoryChannelLayer",
        },
    }


@pytest.fixture(autouse=True)
def use_local_classifier(settings):
    """Testes nunca chamam o Gemini; o classificador local responde no lugar."""
    settings.MODERATION_CLASSIFIER_PROVIDER = "local"
    settings.PROFANITY_LIST = ["idiota", "imbecil"]


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()
