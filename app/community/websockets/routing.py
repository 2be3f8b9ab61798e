from django.urls import re_path

from app.community.websockets.consumers import CommunityConsumer

websocket_urlpatterns = [
    re_path(r"ws/communities/(?P<community_id>[0-9a-f-]+)/$", CommunityConsumer.as_asgi()),
]
