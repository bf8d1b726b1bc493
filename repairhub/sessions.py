"""Per-chat registry of signup view-models for the bot."""

import logging
from collections.abc import Callable

from repairhub.viewmodels.signup import SignupViewModel

logger = logging.getLogger(__name__)


class SignupSessions:
    """Creates a view-model per chat on first use and hands the same one back after that."""

    def __init__(self, factory: Callable[[], SignupViewModel]):
        self._factory = factory
        self._sessions: dict[int, SignupViewModel] = {}

    def get(self, chat_id: int) -> SignupViewModel:
        vm = self._sessions.get(chat_id)
        if vm is None:
            vm = self._factory()
            self._sessions[chat_id] = vm
            logger.debug("Signup session created: chat_id=%s", chat_id)
        return vm

    def start(self, chat_id: int) -> SignupViewModel:
        """Return the chat's view-model with a clean form."""
        vm = self.get(chat_id)
        if not vm.state.submission_in_flight:
            vm.reset_form()
        return vm

    def drop(self, chat_id: int) -> None:
        if self._sessions.pop(chat_id, None) is not None:
            logger.debug("Signup session dropped: chat_id=%s", chat_id)

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
