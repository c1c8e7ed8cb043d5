"""
Tests for ChatRepository against an in-memory SQLite database.
"""

from app.db.models import Message, User
from app.services.chat_repository import ChatRepository

CHAT_ID = "5c1d9a7e-2b4f-4c8e-8a11-0f3e2d1c9b77"


def test_ensure_user_is_idempotent(db_session) -> None:
    repo = ChatRepository(db_session)
    first = repo.ensure_user("user-1")
    second = repo.ensure_user("user-1")
    assert first.id == second.id == "user-1"
    assert first.email == "anonymous-user-1@local"
    assert first.password is None
    assert db_session.query(User).count() == 1


def test_save_chat_and_update_title(db_session) -> None:
    repo = ChatRepository(db_session)
    repo.ensure_user("user-1")
    repo.save_chat(CHAT_ID, "user-1", "New Chat")

    assert repo.update_chat_title(CHAT_ID, "Raccolta vetro Cittadella")
    assert repo.get_chat_by_id(CHAT_ID).title == "Raccolta vetro Cittadella"
    assert repo.update_chat_title("missing", "x") is False


def test_save_messages_skips_known_ids(db_session) -> None:
    repo = ChatRepository(db_session)
    repo.ensure_user("user-1")
    repo.save_chat(CHAT_ID, "user-1", "New Chat")

    first = repo.save_messages(CHAT_ID, [{"id": "m1", "role": "user", "parts": [{"type": "text", "text": "Ciao"}]}])
    assert [m.id for m in first] == ["m1"]

    inserted = repo.save_messages(CHAT_ID, [
        {"id": "m1", "role": "user", "parts": [{"type": "text", "text": "Ciao"}]},
        {"id": "a1", "role": "assistant", "parts": [{"type": "text", "text": "Ciao!"}]},
        {"id": "a1", "role": "assistant", "parts": [{"type": "text", "text": "Ciao!"}]},
    ])
    assert [m.id for m in inserted] == ["a1"]
    assert db_session.query(Message).count() == 2


def test_save_messages_assigns_missing_ids(db_session) -> None:
    repo = ChatRepository(db_session)
    repo.ensure_user("user-1")
    repo.save_chat(CHAT_ID, "user-1", "New Chat")

    inserted = repo.save_messages(CHAT_ID, [{"role": "user", "parts": []}, {"id": None, "role": "user"}])
    assert len(inserted) == 2
    assert all(m.id for m in inserted)
    assert inserted[0].id != inserted[1].id
    assert inserted[1].attachments == []


def test_save_messages_skips_ids_stored_in_another_chat(db_session) -> None:
    other_chat = "9a0c7d41-6f2e-4b3a-b8d5-1e4f2a7c6b90"
    repo = ChatRepository(db_session)
    repo.ensure_user("user-1")
    repo.save_chat(CHAT_ID, "user-1", "New Chat")
    repo.save_chat(other_chat, "user-1", "New Chat")
    repo.save_messages(CHAT_ID, [{"id": "m1", "role": "user", "parts": [{"type": "text", "text": "Ciao"}]}])

    inserted = repo.save_messages(other_chat, [
        {"id": "m1", "role": "user", "parts": [{"type": "text", "text": "Ciao"}]},
        {"id": "m2", "role": "user", "parts": [{"type": "text", "text": "Via Roma"}]},
    ])

    assert [m.id for m in inserted] == ["m2"]
    assert db_session.get(Message, "m1").chat_id == CHAT_ID
    assert [m.id for m in repo.get_messages_by_chat_id(other_chat)] == ["m2"]
