from __future__ import annotations

from datetime import timedelta

import pytest
from django.contrib.auth.models import User
from django.db import connection
from django.test.utils import CaptureQueriesContext
from django.utils import timezone

from accounts.models import UserProfile
from messaging.models import Conversation, ConversationParticipant, Message
from messaging.services import list_conversations, start_conversation


def _user(username: str, email: str = "", /, **profile_fields) -> User:
    u = User.objects.create_user(username=username, password="pw", email=email)
    if profile_fields:
        for k, v in profile_fields.items():
            setattr(u.profile, k, v)
        u.profile.save(update_fields=list(profile_fields))
    return u


def _conversation(*users, title: str = "", last_message_at=None) -> Conversation:
    c = Conversation.objects.create(title=title, created_by=users[0], last_message_at=last_message_at)
    for i, u in enumerate(users):
        ConversationParticipant.objects.create(
            conversation=c, user=u, role=ConversationParticipant.ROLE_OWNER if i == 0 else ConversationParticipant.ROLE_MEMBER
        )
    return c


@pytest.mark.django_db
def test_each_conversation_listed_exactly_once():
    p = _user("p", "p@example.com")
    a = _user("a", "a@example.com")
    b = _user("b", "b@example.com")
    group = _conversation(p, a, b, title="Study group")
    direct = _conversation(p, a)
    _conversation(a, b)  # P is not a member

    result = list_conversations(p.id)
    assert result.ok
    ids = [s.id for s in result.data]
    assert sorted(ids) == sorted([group.id, direct.id])
    assert len(ids) == len(set(ids))
    group_summary = next(s for s in result.data if s.id == group.id)
    assert {i.user_id for i in group_summary.participants} == {a.id, b.id}


@pytest.mark.django_db
def test_display_name_fallback_and_missing_profile():
    p = _user("viewer", "viewer@example.com")
    named = _user("n1", "n1@example.com", full_name="Nora Lane", username="nora")
    handle = _user("n2", "n2@example.com", username="handle_only")
    bare = _user("n3", "bare@example.com")
    UserProfile.objects.filter(user=bare).delete()
    c = _conversation(p, named, handle, bare)

    result = list_conversations(p.id)
    assert result.ok
    names = {i.user_id: i.display_name for i in result.data[0].participants}
    assert result.data[0].id == c.id
    assert names[named.id] == "Nora Lane"
    assert names[handle.id] == "handle_only"
    assert names[bare.id] == "bare@example.com"
    assert all(i.avatar_url for i in result.data[0].participants)


@pytest.mark.django_db
def test_ordered_by_latest_activity_with_previews_and_unread():
    p = _user("p2", "p2@example.com")
    a = _user("a2", "a2@example.com")
    now = timezone.now()
    older = _conversation(p, a, title="older", last_message_at=now - timedelta(hours=2))
    newer = _conversation(p, a, title="newer", last_message_at=now - timedelta(minutes=5))
    silent = _conversation(p, a, title="silent")
    Message.objects.create(conversation=older, sender=a, content="old news", created_at=now - timedelta(hours=2))
    Message.objects.create(conversation=newer, sender=a, content="hi", created_at=now - timedelta(minutes=6))
    Message.objects.create(conversation=newer, sender=p, content="hello back", created_at=now - timedelta(minutes=5))

    result = list_conversations(p.id)
    assert [s.id for s in result.data] == [newer.id, older.id, silent.id]
    newer_summary = result.data[0]
    assert newer_summary.last_message.content == "hello back"
    assert newer_summary.unread_count == 1
    assert result.data[2].last_message is None
    assert result.data[2].unread_count == 0
    payload = newer_summary.as_dict()
    assert payload["participants"][0]["user_id"] == a.id


@pytest.mark.django_db
def test_no_conversations_is_empty_not_error():
    p = _user("lonely")
    result = list_conversations(p.id)
    assert result.ok and result.data == []


def test_empty_user_id_is_validation_error():
    result = list_conversations("")
    assert not result.ok
    assert result.error.code == "validation"


@pytest.mark.django_db
def test_start_conversation_reuses_direct_conversation():
    a = _user("sa")
    b = _user("sb")
    first = start_conversation(a.id, [b.id])
    assert first.ok and first.data["created"] is True
    again = start_conversation(b.id, [a.id, a.id])
    assert again.ok and again.data["created"] is False
    assert again.data["conversation"].id == first.data["conversation"].id
    roles = dict(ConversationParticipant.objects.filter(conversation=first.data["conversation"]).values_list("user_id", "role"))
    assert roles == {a.id: "owner", b.id: "member"}

    titled = start_conversation(a.id, [b.id], title="Grammar")
    assert titled.ok and titled.data["created"] is True


@pytest.mark.django_db
def test_start_conversation_rejects_unknown_or_inactive_users():
    a = _user("ua")
    gone = _user("ub")
    gone.is_active = False
    gone.save(update_fields=["is_active"])
    assert start_conversation(a.id, []).error.code == "validation"
    assert start_conversation(a.id, [a.id]).error.code == "validation"
    result = start_conversation(a.id, [gone.id, 999999])
    assert result.error.code == "validation"
    assert not Conversation.objects.exists()


def _resolver_queries(user_id) -> tuple[int, list]:
    with CaptureQueriesContext(connection) as ctx:
        result = list_conversations(user_id)
    assert result.ok
    return len(ctx), result.data


@pytest.mark.django_db
def test_resolver_query_count_does_not_grow_with_conversations():
    p = _user("qp", "qp@example.com")
    friends = [_user(f"qf{i}", f"qf{i}@example.com") for i in range(4)]
    now = timezone.now()

    first = _conversation(p, friends[0], last_message_at=now)
    Message.objects.create(conversation=first, sender=friends[0], content="hi", created_at=now)
    baseline, _ = _resolver_queries(p.id)

    for i, friend in enumerate(friends[1:], start=1):
        c = _conversation(p, friend, last_message_at=now - timedelta(minutes=i))
        Message.objects.create(conversation=c, sender=friend, content=f"m{i}", created_at=now - timedelta(minutes=i))
    executed, summaries = _resolver_queries(p.id)

    assert executed == baseline
    assert [s.unread_count for s in summaries] == [1, 1, 1, 1]
    assert [s.last_message.content for s in summaries] == ["hi", "m1", "m2", "m3"]
