from api.features.conversation.access import can_access
from api.features.conversation.entities.conversation import Conversation


def test_owner_can_access_own_conversation():
    conversation = Conversation(user_id="user-a", title="t")
    assert can_access("user-a", conversation)


def test_other_user_cannot_access_owned_conversation():
    conversation = Conversation(user_id="user-a", title="t")
    assert not can_access("user-b", conversation)


def test_anonymous_cannot_access_owned_conversation():
    conversation = Conversation(user_id="user-a", title="t")
    assert not can_access(None, conversation)


def test_anonymous_can_access_ownerless_conversation():
    conversation = Conversation(user_id=None, title="t")
    assert conversation.is_ownerless()
    assert can_access(None, conversation)


def test_authenticated_caller_cannot_access_ownerless_conversation():
    conversation = Conversation(user_id=None, title="t")
    assert not can_access("user-a", conversation)
