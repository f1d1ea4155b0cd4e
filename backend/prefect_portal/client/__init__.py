"""
Python client for the Prefect Portal API.

    async with PortalClient("http://localhost:8000/api/v1") as client:
        result = await client.sign_in(email, password)
        feed = ResourceFeed(client.resource("complaints"), client.session)
        await feed.load()
"""
from prefect_portal.client.api_client import PortalClient, ResourceApi
from prefect_portal.client.channel import ConversationChannel, ConversationView
from prefect_portal.client.feed import DialogBusyError, DialogState, FeedDialog, FeedFilters, Notification, ResourceFeed
from prefect_portal.client.message_feed import MessageFeed
from prefect_portal.client.session import Principal, Session

__all__ = [
    "ConversationChannel",
    "ConversationView",
    "DialogBusyError",
    "DialogState",
    "FeedDialog",
    "FeedFilters",
    "MessageFeed",
    "Notification",
    "PortalClient",
    "Principal",
    "ResourceApi",
    "ResourceFeed",
    "Session",
]
