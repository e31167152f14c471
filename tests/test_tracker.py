"""Unit tests for the animation tracker."""
import pytest

from revealchat.conversation import AnimationTracker, Conversation, Message, Role
from revealchat.streaming import RevealSession


def _conversation() -> Conversation:
    return Conversation(
        messages=[
            Message(role=Role.USER, content="Hi"),
            Message(role=Role.ASSISTANT, content="Hello there!"),
        ]
    )


class TestNeedsReveal:
    """Tests for which messages get a reveal."""

    def test_fresh_assistant_message_needs_reveal(self):
        """Test that an assistant reply that never animated gets a reveal."""
        conversation = _conversation()
        tracker = AnimationTracker(conversation)
        assert tracker.needs_reveal(conversation.messages[1])

    def test_user_message_never_needs_reveal(self):
        """Test that user messages are shown at once."""
        conversation = _conversation()
        tracker = AnimationTracker(conversation)
        assert not tracker.needs_reveal(conversation.messages[0])

    def test_animated_message_does_not_need_reveal(self):
        """Test that a revealed message is not revealed again."""
        conversation = _conversation()
        tracker = AnimationTracker(conversation)
        tracker.mark_animated(conversation.messages[1].id)
        assert not tracker.needs_reveal(conversation.messages[1])
        assert tracker.is_animated(conversation.messages[1].id)


class TestMarkAnimated:
    """Tests for flipping and persisting the flag."""

    def test_mark_is_idempotent(self, memory_store):
        """Test that marking twice leaves one pending write."""
        conversation = _conversation()
        tracker = AnimationTracker(conversation, memory_store)
        message_id = conversation.messages[1].id

        tracker.mark_animated(message_id)
        tracker.mark_animated(message_id)

        assert conversation.messages[1].has_animated is True
        assert tracker.pending == frozenset({message_id})

    def test_unknown_id_is_logged(self):
        """Test that an unknown id only logs a warning."""
        logged: list[tuple[str, str, str]] = []
        tracker = AnimationTracker(_conversation())
        tracker.set_debug_callback(lambda level, component, message: logged.append((level, component, message)))

        tracker.mark_animated("missing")

        assert logged[0][0] == "warning"
        assert "missing" in logged[0][2]

    def test_force_all_animated(self):
        """Test that loading marks everything without pending writes."""
        conversation = _conversation()
        tracker = AnimationTracker(conversation)
        tracker.force_all_animated()
        assert all(message.has_animated for message in conversation.messages)
        assert tracker.pending == frozenset()

    @pytest.mark.asyncio
    async def test_flush_persists_flag(self, memory_store):
        """Test that a flush writes the flag to the store."""
        conversation = _conversation()
        await memory_store.create_conversation(conversation)
        tracker = AnimationTracker(conversation, memory_store)
        message_id = conversation.messages[1].id

        tracker.mark_animated(message_id)
        await tracker.flush()

        stored = await memory_store.get_conversation(conversation.id)
        assert stored.messages[1].has_animated is True
        assert tracker.pending == frozenset()

    @pytest.mark.asyncio
    async def test_flush_without_store(self):
        """Test that a tracker without a store flushes to nothing."""
        tracker = AnimationTracker(_conversation())
        await tracker.flush()
        assert tracker.pending == frozenset()


class TestRevealIntegration:
    """Tests for tracker and reveal session working together."""

    def test_completed_reveal_marks_message(self, scheduler):
        """Test that completion flips the flag exactly once."""
        conversation = _conversation()
        tracker = AnimationTracker(conversation)
        reply = conversation.messages[1]

        session = RevealSession(reply.id, reply.content, scheduler=scheduler, on_complete=tracker.mark_animated)
        session.start()
        scheduler.run_until_idle()

        assert reply.has_animated is True
        assert not tracker.needs_reveal(reply)

    def test_cancelled_reveal_does_not_mark_message(self, scheduler):
        """Test that stopping a reveal leaves the message eligible."""
        conversation = _conversation()
        tracker = AnimationTracker(conversation)
        reply = conversation.messages[1]

        session = RevealSession(reply.id, reply.content, scheduler=scheduler, on_complete=tracker.mark_animated)
        session.start()
        session.stop()
        scheduler.run_until_idle()

        assert reply.has_animated is False
        assert tracker.needs_reveal(reply)
