"""
Signup view-model: form state, validation and the submission state machine.

Submission flow:
  Idle → Submitting → Succeeded | Failed

``submit()`` validates synchronously and only then schedules the call to the
auth service; a second ``submit()`` while one is in flight is ignored.
Every intent publishes a new immutable ``SignupUiState`` to subscribers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from repairhub.schemas import Role, SignupRequest
from repairhub.services.auth import AuthService, SignupError, SignupSuccess
from repairhub.services.directory import DirectoryError, RegionDirectory
from repairhub.services.token_store import TokenStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

ERR_EMPTY_FIELDS = "Please fill in all fields"
ERR_EMAIL_FORMAT = "Invalid email format"
ERR_PASSWORD_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
ERR_CITY_REGION = "Invalid city for selected region"
ERR_SIGNUP_FAILED = "Signup failed"
ERR_REGIONS_LOAD = "Could not load regions"

StateListener = Callable[["SignupUiState"], None]


@dataclass(frozen=True)
class SignupUiState:
    name: str = ""
    email: str = ""
    password: str = ""
    selected_role: str = Role.CITIZEN.value
    selected_region: str = ""
    selected_city: str = ""
    region_dropdown_open: bool = False
    city_dropdown_open: bool = False
    regions: list[str] = field(default_factory=list)
    cities: list[str] = field(default_factory=list)
    region_city_map: dict[str, list[str]] = field(default_factory=dict)
    is_loading_regions: bool = False
    regions_error: str | None = None
    submission_in_flight: bool = False
    submission_error: str | None = None
    submission_succeeded: bool = False
    picked_image: Any = None


def validate_signup(state: SignupUiState) -> str | None:
    """Return the first validation error for ``state``, or None if it can be submitted."""
    required = (state.name, state.email, state.password, state.selected_region, state.selected_city)
    if any(not value.strip() for value in required):
        return ERR_EMPTY_FIELDS
    # Only an "@" is required here
    if "@" not in state.email:
        return ERR_EMAIL_FORMAT
    if len(state.password) < MIN_PASSWORD_LENGTH:
        return ERR_PASSWORD_SHORT
    if state.selected_city not in state.region_city_map.get(state.selected_region, []):
        return ERR_CITY_REGION
    return None


class SignupViewModel:
    """Owns the signup form; the presentation layer only reads ``state`` and calls intents."""

    def __init__(
        self,
        auth_service: AuthService,
        token_store: TokenStore,
        directory: RegionDirectory,
    ):
        self._auth = auth_service
        self._tokens = token_store
        self._directory = directory
        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._state = SignupUiState()
        self.load_regions_and_cities()
        self._initial_state = self._state

    # ── Observation ────────────────────────────────────────

    @property
    def state(self) -> SignupUiState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for every new snapshot; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes) -> None:
        self._publish(replace(self._state, **changes))

    def _publish(self, state: SignupUiState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("State listener %r failed", listener)

    # ── Directory ──────────────────────────────────────────

    def load_regions_and_cities(self) -> None:
        mapping = self._directory.get_region_city_map()
        self._update(
            region_city_map=mapping,
            regions=list(mapping.keys()),
            cities=mapping.get(self._state.selected_region, []),
            is_loading_regions=False,
        )

    async def load_regions(self) -> None:
        """Refresh the directory from an async source, keeping the old map on failure."""
        self._update(is_loading_regions=True)
        try:
            mapping = await self._directory.fetch_region_city_map()
        except DirectoryError as e:
            logger.error("Region load failed: %s", e)
            self._update(is_loading_regions=False, regions_error=ERR_REGIONS_LOAD)
            return
        self._update(
            region_city_map=mapping,
            regions=list(mapping.keys()),
            cities=mapping.get(self._state.selected_region, []),
            is_loading_regions=False,
            regions_error=None,
        )

    # ── Field intents ──────────────────────────────────────

    def set_name(self, name: str) -> None:
        self._update(name=name, submission_error=None)

    def set_email(self, email: str) -> None:
        self._update(email=email, submission_error=None)

    def set_password(self, password: str) -> None:
        self._update(password=password, submission_error=None)

    def set_role(self, role: str) -> None:
        self._update(selected_role=role, submission_error=None)

    def select_region(self, region: str) -> None:
        self._update(
            selected_region=region,
            selected_city="",
            cities=list(self._state.region_city_map.get(region, [])),
            region_dropdown_open=False,
            submission_error=None,
        )

    def select_city(self, city: str) -> None:
        # Membership is checked at submit time
        self._update(selected_city=city, city_dropdown_open=False, submission_error=None)

    def toggle_region_dropdown(self, expanded: bool | None = None) -> None:
        value = not self._state.region_dropdown_open if expanded is None else expanded
        self._update(region_dropdown_open=value)

    def toggle_city_dropdown(self, expanded: bool | None = None) -> None:
        value = not self._state.city_dropdown_open if expanded is None else expanded
        self._update(city_dropdown_open=value)

    def pick_image(self, reference: Any) -> None:
        self._update(picked_image=reference, submission_error=None)

    # ── Submission ─────────────────────────────────────────

    def submit(self) -> asyncio.Task | None:
        """
        Validate and start a signup.

        Returns the scheduled task, or None when the call was ignored
        (already in flight) or rejected by validation. Must be called from
        within a running event loop.
        """
        current = self._state
        if current.submission_in_flight:
            logger.debug("Signup already in flight; ignoring submit")
            return None

        logger.debug("Starting signup process for email: %s", current.email)
        error = validate_signup(current)
        if error:
            logger.debug("Validation failed: %s", error)
            self._update(submission_error=error)
            return None

        loop = asyncio.get_running_loop()
        self._update(submission_in_flight=True, submission_error=None, submission_succeeded=False)
        request = SignupRequest(
            name=current.name,
            email=current.email,
            password=current.password,
            role=current.selected_role,
            region=current.selected_region,
            city=current.selected_city,
            image=current.picked_image,
        )
        task = loop.create_task(self._run_signup(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_signup(self, request: SignupRequest) -> None:
        try:
            result = await self._auth.signup(request)
            if isinstance(result, SignupSuccess):
                logger.info("Signup successful for %s", request.email)
                if result.token is not None:
                    await self._save_token(result.token)
                self._update(submission_in_flight=False, submission_succeeded=True, submission_error=None)
            elif isinstance(result, SignupError):
                logger.error("Signup failed: %s", result.message)
                self._update(
                    submission_in_flight=False,
                    submission_succeeded=False,
                    submission_error=result.message or ERR_SIGNUP_FAILED,
                )
            else:
                raise TypeError(f"Unexpected signup result: {result!r}")
        except Exception as e:
            logger.exception("Unexpected error during signup")
            self._update(
                submission_in_flight=False,
                submission_succeeded=False,
                submission_error=f"An unexpected error occurred: {e}",
            )

    async def _save_token(self, token: str) -> None:
        # A failed save does not undo the signup
        try:
            await self._tokens.save(token)
        except Exception as e:
            logger.error("Saving auth token failed: %s", e)

    # ── Reset ──────────────────────────────────────────────

    def reset_signup_status(self) -> None:
        self._update(submission_succeeded=False, submission_error=None)

    def reset_form(self) -> None:
        self._publish(self._initial_state)
