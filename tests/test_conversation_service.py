import pytest

from api.features.auth.entities.user import User
from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message
from api.features.conversation.service import ConversationService, SendMessageCommand
from api.shared.result import ErrorKind
from api.shared.unit_of_work import UnitOfWork


class ExplodingGenerationClient:
    async def generate(self, **kwargs):
        raise RuntimeError("boom")


def command(message="Hello", **kwargs):
    return SendMessageCommand(
        message=message,
        details=kwargs.pop("details", "product launch"),
        theme=kwargs.pop("theme", "spring"),
        platform=kwargs.pop("platform", "instagram"),
        **kwargs,
    )


async def count(database, model, **filters):
    session = database.get_session()
    try:
        async with UnitOfWork(session) as uow:
            repository = uow.messages if model is Message else uow.conversations
            return await repository.count(**filters)
    finally:
        await session.close()


async def create_user(session, email):
    async with UnitOfWork(session) as uow:
        user = await uow.users.create(
            User(name=email.split("@")[0], email=email, password_hash="x")
        )
        user_id = user.id
        await uow.commit()
    return user_id


@pytest.fixture
def service(generation_client):
    return ConversationService(generation_client)


@pytest.fixture
async def alice(session):
    return await create_user(session, "alice@mail.com")


@pytest.fixture
async def bob(session):
    return await create_user(session, "bob@mail.com")


async def test_new_conversation_turn_is_stored(service, session, database, webhook):
    webhook.respond((200, {"text": "Hi"}))

    result = await service.send_message(UnitOfWork(session), None, command("Hello"))

    assert result.ok
    turn = result.value
    assert turn.created
    assert turn.conversation.user_id is None
    assert turn.conversation.title == "Hello"
    assert turn.conversation.metadata["platform"] == "instagram"
    assert [m.role for m in turn.conversation.messages] == ["user", "assistant"]
    assert turn.assistant_message.decoded_content() == {"text": "Hi"}
    assert turn.generated_content == {"text": "Hi"}
    assert turn.user_message.created_at <= turn.assistant_message.created_at
    assert await count(database, Message) == 2


async def test_follow_up_turn_appends_exactly_two_messages(
    service, session, database, alice
):
    first = await service.send_message(UnitOfWork(session), alice, command("one"))
    conversation_id = first.value.conversation.id

    second = await service.send_message(
        UnitOfWork(session), alice, command("two", conversation_id=conversation_id)
    )

    assert second.ok
    assert not second.value.created
    assert await count(database, Message, conversation_id=conversation_id) == 4
    contents = [m.content for m in second.value.conversation.messages]
    assert contents[0] == "one"
    assert contents[2] == "two"


async def test_title_defaults_to_truncated_message(service, session):
    result = await service.send_message(UnitOfWork(session), None, command("x" * 80))

    assert result.value.conversation.title == "x" * 50


async def test_explicit_title_is_used(service, session):
    result = await service.send_message(
        UnitOfWork(session), None, command("Hello", title="Campaign ideas")
    )

    assert result.value.conversation.title == "Campaign ideas"


async def test_non_json_reply_is_stored_as_null(service, session, webhook):
    webhook.respond((200, "not json"))

    result = await service.send_message(UnitOfWork(session), None, command())

    assert result.ok
    assert result.value.assistant_message.content == "null"
    assert result.value.generated_content is None


async def test_upstream_failure_on_new_conversation_leaves_nothing(
    service, session, database, webhook
):
    webhook.respond((503, "unavailable"))

    result = await service.send_message(UnitOfWork(session), None, command())

    assert not result.ok
    assert result.error.kind is ErrorKind.UPSTREAM_HTTP_FAILURE
    assert result.error.status_code == 503
    assert result.error.details["error"] == "unavailable"
    assert await count(database, Conversation) == 0
    assert await count(database, Message) == 0


async def test_upstream_failure_on_existing_conversation_keeps_history(
    service, session, database, webhook, alice
):
    first = await service.send_message(UnitOfWork(session), alice, command())
    conversation_id = first.value.conversation.id
    before = await service.get_conversation(UnitOfWork(session), alice, conversation_id)
    webhook.respond((503, "unavailable"))

    result = await service.send_message(
        UnitOfWork(session), alice, command("again", conversation_id=conversation_id)
    )

    assert result.error.kind is ErrorKind.UPSTREAM_HTTP_FAILURE
    assert await count(database, Message, conversation_id=conversation_id) == 2
    after = await service.get_conversation(UnitOfWork(session), alice, conversation_id)
    assert after.value.updated_at == before.value.updated_at


async def test_unreachable_upstream_rolls_back(service, session, database, webhook):
    import httpx

    webhook.respond(httpx.ConnectTimeout("timed out"))

    result = await service.send_message(UnitOfWork(session), None, command())

    assert result.error.kind is ErrorKind.UPSTREAM_UNREACHABLE
    assert await count(database, Conversation) == 0
    assert await count(database, Message) == 0


async def test_unexpected_error_is_internal_failure_and_rolls_back(session, database):
    service = ConversationService(ExplodingGenerationClient())

    result = await service.send_message(UnitOfWork(session), None, command())

    assert result.error.kind is ErrorKind.INTERNAL_FAILURE
    assert result.error.details["error"] == "boom"
    assert await count(database, Conversation) == 0
    assert await count(database, Message) == 0


async def test_missing_conversation_is_not_found(service, session, database):
    result = await service.send_message(
        UnitOfWork(session), None, command(conversation_id="01NOTAREALCONVERSATIONID00")
    )

    assert result.error.kind is ErrorKind.NOT_FOUND
    assert await count(database, Message) == 0


async def test_other_user_cannot_post_to_owned_conversation(
    service, session, database, webhook, alice, bob
):
    first = await service.send_message(UnitOfWork(session), alice, command())
    conversation_id = first.value.conversation.id

    result = await service.send_message(
        UnitOfWork(session), bob, command(conversation_id=conversation_id)
    )

    assert result.error.kind is ErrorKind.FORBIDDEN
    assert await count(database, Message, conversation_id=conversation_id) == 2
    assert len(webhook.requests) == 1


async def test_anonymous_caller_cannot_read_owned_conversation(service, session, alice):
    first = await service.send_message(UnitOfWork(session), alice, command())

    result = await service.get_conversation(
        UnitOfWork(session), None, first.value.conversation.id
    )

    assert result.error.kind is ErrorKind.FORBIDDEN


async def test_authenticated_caller_cannot_read_ownerless_conversation(
    service, session, alice
):
    first = await service.send_message(UnitOfWork(session), None, command())

    result = await service.get_conversation(
        UnitOfWork(session), alice, first.value.conversation.id
    )

    assert result.error.kind is ErrorKind.FORBIDDEN


async def test_list_is_scoped_to_owner_and_most_recent_first(service, session, alice, bob):
    older = await service.send_message(UnitOfWork(session), alice, command("older"))
    newer = await service.send_message(UnitOfWork(session), alice, command("newer"))
    await service.send_message(UnitOfWork(session), bob, command("bob's"))
    await service.send_message(UnitOfWork(session), None, command("anonymous"))
    await service.send_message(
        UnitOfWork(session),
        alice,
        command("bump", conversation_id=older.value.conversation.id),
    )

    result = await service.list_conversations(UnitOfWork(session), alice)

    ids = [c.id for c in result.value]
    assert ids == [older.value.conversation.id, newer.value.conversation.id]
    assert result.value[0].latest_message.role == "assistant"

    anonymous = await service.list_conversations(UnitOfWork(session), None)
    assert [c.title for c in anonymous.value] == ["anonymous"]


async def test_update_renames_conversation(service, session, alice):
    first = await service.send_message(UnitOfWork(session), alice, command())
    conversation_id = first.value.conversation.id

    result = await service.update_conversation(
        UnitOfWork(session), alice, conversation_id, "Renamed"
    )

    assert result.value.title == "Renamed"
    fetched = await service.get_conversation(UnitOfWork(session), alice, conversation_id)
    assert fetched.value.title == "Renamed"


async def test_update_and_delete_missing_conversation(service, session, alice):
    missing = "01NOTAREALCONVERSATIONID00"

    updated = await service.update_conversation(UnitOfWork(session), alice, missing, "x")
    deleted = await service.delete_conversation(UnitOfWork(session), alice, missing)

    assert updated.error.kind is ErrorKind.NOT_FOUND
    assert deleted.error.kind is ErrorKind.NOT_FOUND


async def test_update_and_delete_forbidden_conversation(
    service, session, database, alice, bob
):
    first = await service.send_message(UnitOfWork(session), alice, command("mine"))
    conversation_id = first.value.conversation.id

    updated = await service.update_conversation(
        UnitOfWork(session), bob, conversation_id, "stolen"
    )
    deleted = await service.delete_conversation(UnitOfWork(session), bob, conversation_id)

    assert updated.error.kind is ErrorKind.FORBIDDEN
    assert deleted.error.kind is ErrorKind.FORBIDDEN
    fetched = await service.get_conversation(UnitOfWork(session), alice, conversation_id)
    assert fetched.value.title == "mine"
    assert await count(database, Message, conversation_id=conversation_id) == 2


async def test_delete_removes_messages(service, session, database, alice):
    first = await service.send_message(UnitOfWork(session), alice, command())
    conversation_id = first.value.conversation.id

    result = await service.delete_conversation(UnitOfWork(session), alice, conversation_id)

    assert result.ok
    assert await count(database, Conversation) == 0
    assert await count(database, Message) == 0
