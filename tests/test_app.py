"""Tests for the TUI wiring between reveals and the chat service."""
import pytest

from revealchat.streaming import RevealStatus
from revealchat.ui.app import RevealChatApp
from revealchat.ui.widgets import ChatInputBar, RevealingMessage


async def _send(app: RevealChatApp, pilot, text: str) -> RevealingMessage:
    """Submit a message and wait until its reply is on screen."""
    app.query_one("#chat-input-bar", ChatInputBar).set_text(text)
    app.action_send()
    await pilot.pause()
    await app.workers.wait_for_complete()
    await pilot.pause()
    return app.query(RevealingMessage).last()


class TestRevealWiring:
    """Tests for how finished reveals reach the animation tracker."""

    @pytest.mark.asyncio
    async def test_completed_reveal_marks_message(self, chat_service, scheduler):
        """Test that a reply is marked animated once its reveal completes."""
        app = RevealChatApp(chat_service, scheduler=scheduler)
        async with app.run_test() as pilot:
            reply = await _send(app, pilot, "hello")

            assert reply.is_revealing
            assert chat_service.needs_reveal(chat_service.messages[-1])

            scheduler.run_until_idle()
            await pilot.pause()

            assert reply.session.status == RevealStatus.COMPLETED
            assert not chat_service.needs_reveal(chat_service.messages[-1])
            assert chat_service.messages[-1].has_animated is True

    @pytest.mark.asyncio
    async def test_stopped_reveal_is_not_marked(self, chat_service, scheduler):
        """Test that stopping a reveal leaves the reply eligible."""
        app = RevealChatApp(chat_service, scheduler=scheduler)
        async with app.run_test() as pilot:
            reply = await _send(app, pilot, "hello")
            app.action_stop_reveal()
            await pilot.pause()

            assert reply.session.status == RevealStatus.CANCELED
            assert scheduler.pending == 0
            assert chat_service.needs_reveal(chat_service.messages[-1])

    @pytest.mark.asyncio
    async def test_unmount_mid_reveal_cancels_without_marking(self, chat_service, scheduler):
        """Test that removing a revealing reply disposes its session."""
        app = RevealChatApp(chat_service, scheduler=scheduler)
        async with app.run_test() as pilot:
            reply = await _send(app, pilot, "hello")
            session = reply.session

            await reply.remove()
            await pilot.pause()

            assert session.status == RevealStatus.CANCELED
            assert scheduler.pending == 0
            assert scheduler.run_until_idle() == 0
            assert chat_service.needs_reveal(chat_service.messages[-1])

    @pytest.mark.asyncio
    async def test_loaded_history_is_not_revealed(self, chat_service, memory_store, scheduler):
        """Test that replies of a loaded conversation show in full."""
        await chat_service.send_message("hello")
        conversation_id = chat_service.conversation.id
        chat_service.new_conversation()

        app = RevealChatApp(chat_service, scheduler=scheduler, conversation_id=conversation_id)
        async with app.run_test() as pilot:
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

            replies = list(app.query(RevealingMessage))
            assert len(replies) == 1
            assert replies[0].session is None
            assert scheduler.pending == 0
