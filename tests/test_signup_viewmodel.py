"""Tests for the signup view-model (mocked auth service and token store)."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from repairhub.services.auth import SignupError, SignupSuccess
from repairhub.services.directory import DEFAULT_REGION_CITY_MAP, DirectoryError, StaticRegionDirectory
from repairhub.viewmodels.signup import SignupUiState, SignupViewModel, validate_signup


# ── Construction ──────────────────────────────────────────

def test_directory_loaded_on_construction(vm):
    """Regions should be available as soon as the view-model exists."""
    assert vm.state.region_city_map == DEFAULT_REGION_CITY_MAP
    assert vm.state.regions == list(DEFAULT_REGION_CITY_MAP.keys())
    assert vm.state.cities == []
    assert vm.state.selected_role == "Citizen"
    assert vm.state.is_loading_regions is False


def test_custom_directory(auth_service, token_store):
    directory = StaticRegionDirectory({"North": ["A", "B"]})
    vm = SignupViewModel(auth_service, token_store, directory)
    assert vm.state.regions == ["North"]


# ── Field intents ─────────────────────────────────────────

@pytest.mark.parametrize("intent, value, field", [
    ("set_name", "Abel", "name"),
    ("set_email", "a@b.com", "email"),
    ("set_password", "secret1", "password"),
    ("set_role", "Repair Team", "selected_role"),
    ("select_region", "Oromia", "selected_region"),
    ("select_city", "Adama", "selected_city"),
    ("pick_image", "file-123", "picked_image"),
])
def test_edits_clear_error(vm, intent, value, field):
    """Every edit should store the value and dismiss the last error."""
    vm.set_name("")
    # blank form, so this is a validation error; no loop needed since nothing is scheduled
    assert vm.submit() is None
    assert vm.state.submission_error == "Please fill in all fields"

    getattr(vm, intent)(value)
    assert getattr(vm.state, field) == value
    assert vm.state.submission_error is None


def test_select_region_resets_city(vm):
    vm.select_region("Amhara")
    vm.select_city("Gondar")
    vm.toggle_region_dropdown(True)

    vm.select_region("Tigray")
    assert vm.state.selected_city == ""
    assert vm.state.cities == ["Mekelle", "Shire", "Axum", "Adigrat"]
    assert vm.state.region_dropdown_open is False


def test_select_unknown_region_gives_no_cities(vm):
    vm.select_region("Atlantis")
    assert vm.state.cities == []
    assert vm.state.selected_city == ""


def test_select_city_closes_dropdown_without_membership_check(vm):
    vm.select_region("Sidama")
    vm.toggle_city_dropdown(True)
    vm.select_city("Gondar")
    assert vm.state.selected_city == "Gondar"
    assert vm.state.city_dropdown_open is False


def test_toggle_dropdowns(vm):
    vm.toggle_region_dropdown()
    assert vm.state.region_dropdown_open is True
    vm.toggle_region_dropdown()
    assert vm.state.region_dropdown_open is False
    vm.toggle_region_dropdown(False)
    assert vm.state.region_dropdown_open is False

    vm.toggle_city_dropdown(True)
    vm.toggle_city_dropdown(True)
    assert vm.state.city_dropdown_open is True
    vm.toggle_city_dropdown()
    assert vm.state.city_dropdown_open is False


def test_subscribers_receive_snapshots(vm):
    seen = []
    unsubscribe = vm.subscribe(seen.append)
    vm.set_name("Abel")
    vm.set_email("a@b.com")
    assert [s.name for s in seen] == ["Abel", "Abel"]
    assert seen[-1].email == "a@b.com"

    unsubscribe()
    vm.set_name("Other")
    assert len(seen) == 2


def test_failing_subscriber_does_not_break_intents(vm):
    def broken(state):
        raise RuntimeError("render failed")

    vm.subscribe(broken)
    vm.set_name("Abel")
    assert vm.state.name == "Abel"


# ── Validation ────────────────────────────────────────────

@pytest.mark.parametrize("field", ["name", "email", "password", "region", "city"])
@pytest.mark.asyncio
async def test_blank_field_rejected(vm, auth_service, fill_form, field):
    """A blank or whitespace-only required field never reaches the auth service."""
    if field == "region":
        fill_form(vm)
        vm.select_region("   ")
    else:
        fill_form(vm, **{field: "   "})

    assert vm.submit() is None
    assert vm.state.submission_error == "Please fill in all fields"
    assert vm.state.submission_in_flight is False
    assert auth_service.signup.await_count == 0


@pytest.mark.asyncio
async def test_email_without_at_rejected(vm, auth_service, fill_form):
    fill_form(vm, email="not-an-email")
    assert vm.submit() is None
    assert vm.state.submission_error == "Invalid email format"
    assert auth_service.signup.await_count == 0


def test_email_rule_is_only_an_at_sign():
    """Anything with an "@" passes the local check."""
    state = SignupUiState(
        name="Abel", email="@", password="secret1",
        selected_region="Afar", selected_city="Semera",
        region_city_map=DEFAULT_REGION_CITY_MAP,
    )
    assert validate_signup(state) is None


@pytest.mark.asyncio
async def test_short_password_rejected(vm, auth_service, fill_form):
    fill_form(vm, password="abc12")
    assert vm.submit() is None
    assert vm.state.submission_error == "Password must be at least 6 characters"
    assert auth_service.signup.await_count == 0


def test_six_character_password_passes():
    state = SignupUiState(
        name="Abel", email="a@b.com", password="abc123",
        selected_region="Amhara", selected_city="Bahir Dar",
        region_city_map=DEFAULT_REGION_CITY_MAP,
    )
    assert validate_signup(state) is None


@pytest.mark.asyncio
async def test_city_outside_region_rejected(vm, auth_service, fill_form):
    fill_form(vm, region="Tigray", city="Hawassa")
    assert vm.submit() is None
    assert vm.state.submission_error == "Invalid city for selected region"
    assert auth_service.signup.await_count == 0


def test_validation_order():
    """Blank fields are reported before the email shape."""
    state = SignupUiState(email="bad", password="x", region_city_map=DEFAULT_REGION_CITY_MAP)
    assert validate_signup(state) == "Please fill in all fields"


# ── Submission ────────────────────────────────────────────

@pytest.mark.asyncio
async def test_successful_signup_end_to_end(vm, auth_service, token_store, fill_form):
    fill_form(vm)
    task = vm.submit()
    assert task is not None
    assert vm.state.submission_in_flight is True
    assert vm.state.submission_error is None
    assert vm.state.submission_succeeded is False

    await task

    auth_service.signup.assert_awaited_once()
    request = auth_service.signup.await_args.args[0]
    assert request.name == "Abel"
    assert request.email == "a@b.com"
    assert request.password == "secret1"
    assert request.role == "Citizen"
    assert request.region == "Amhara"
    assert request.city == "Bahir Dar"
    assert request.image is None

    token_store.save.assert_awaited_once_with("tok1")
    assert vm.state.submission_succeeded is True
    assert vm.state.submission_in_flight is False
    assert vm.state.submission_error is None


@pytest.mark.asyncio
async def test_picked_image_forwarded(vm, auth_service, fill_form):
    fill_form(vm)
    vm.pick_image("photo-file-id")
    await vm.submit()
    assert auth_service.signup.await_args.args[0].image == "photo-file-id"


@pytest.mark.asyncio
async def test_success_without_token_skips_store(vm, auth_service, token_store, fill_form):
    auth_service.signup.return_value = SignupSuccess(token=None)
    fill_form(vm)
    await vm.submit()
    token_store.save.assert_not_awaited()
    assert vm.state.submission_succeeded is True


@pytest.mark.asyncio
async def test_empty_token_is_still_saved(vm, auth_service, token_store, fill_form):
    """Only a missing token skips the store."""
    auth_service.signup.return_value = SignupSuccess(token="")
    fill_form(vm)
    await vm.submit()
    token_store.save.assert_awaited_once_with("")
    assert vm.state.submission_succeeded is True


@pytest.mark.asyncio
async def test_token_save_failure_keeps_success(vm, token_store, fill_form):
    token_store.save.side_effect = RuntimeError("disk full")
    fill_form(vm)
    await vm.submit()
    assert vm.state.submission_succeeded is True
    assert vm.state.submission_error is None
    assert vm.state.submission_in_flight is False


@pytest.mark.asyncio
async def test_error_result_uses_server_message(vm, auth_service, fill_form):
    auth_service.signup.return_value = SignupError("Email already registered", status_code=409)
    fill_form(vm)
    await vm.submit()
    assert vm.state.submission_error == "Email already registered"
    assert vm.state.submission_succeeded is False
    assert vm.state.submission_in_flight is False


@pytest.mark.asyncio
async def test_error_result_without_message_falls_back(vm, auth_service, fill_form):
    auth_service.signup.return_value = SignupError(None)
    fill_form(vm)
    await vm.submit()
    assert vm.state.submission_error == "Signup failed"


@pytest.mark.asyncio
async def test_unexpected_exception_mapped_to_error(vm, auth_service, token_store, fill_form):
    auth_service.signup.side_effect = RuntimeError("boom")
    fill_form(vm)
    await vm.submit()
    assert vm.state.submission_error == "An unexpected error occurred: boom"
    assert vm.state.submission_in_flight is False
    assert vm.state.submission_succeeded is False
    token_store.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_duplicate_submit_while_in_flight_is_ignored(vm, auth_service, fill_form):
    """Two submits in a row should produce exactly one auth call."""
    gate = asyncio.Event()

    async def slow_signup(request):
        await gate.wait()
        return SignupSuccess(token="tok1")

    auth_service.signup.side_effect = slow_signup
    fill_form(vm)

    first = vm.submit()
    second = vm.submit()
    assert first is not None
    assert second is None
    assert vm.state.submission_in_flight is True

    gate.set()
    await first
    assert auth_service.signup.await_count == 1
    assert vm.state.submission_succeeded is True


def test_submit_outside_event_loop_leaves_form_idle(vm, auth_service, fill_form):
    """Without a running loop nothing is scheduled and the form is not stuck in flight."""
    fill_form(vm)
    with pytest.raises(RuntimeError):
        vm.submit()
    assert vm.state.submission_in_flight is False
    assert vm.state.submission_error is None
    assert auth_service.signup.await_count == 0


@pytest.mark.asyncio
async def test_resubmit_after_failure(vm, auth_service, fill_form):
    auth_service.signup.return_value = SignupError("Server busy")
    fill_form(vm)
    await vm.submit()
    assert vm.state.submission_error == "Server busy"

    auth_service.signup.return_value = SignupSuccess(token="tok2")
    task = vm.submit()
    assert vm.state.submission_error is None
    await task
    assert vm.state.submission_succeeded is True
    assert auth_service.signup.await_count == 2


# ── Reset ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_reset_signup_status_keeps_fields(vm, auth_service, fill_form):
    auth_service.signup.return_value = SignupError("nope")
    fill_form(vm)
    await vm.submit()

    vm.reset_signup_status()
    assert vm.state.submission_error is None
    assert vm.state.submission_succeeded is False
    assert vm.state.name == "Abel"
    assert vm.state.selected_city == "Bahir Dar"


def test_reset_form_is_idempotent(vm, fill_form):
    initial = vm.state
    fill_form(vm)
    vm.toggle_region_dropdown(True)

    vm.reset_form()
    once = vm.state
    vm.reset_form()
    assert once == initial
    assert vm.state == once


# ── Async directory ───────────────────────────────────────

@pytest.mark.asyncio
async def test_load_regions_replaces_map(auth_service, token_store):
    directory = AsyncMock()
    directory.get_region_city_map = lambda: {"Old": ["X"]}
    directory.fetch_region_city_map.return_value = {"New": ["Y", "Z"]}
    vm = SignupViewModel(auth_service, token_store, directory)
    vm.select_region("New")
    assert vm.state.cities == []

    await vm.load_regions()
    assert vm.state.regions == ["New"]
    assert vm.state.cities == ["Y", "Z"]
    assert vm.state.is_loading_regions is False


@pytest.mark.asyncio
async def test_load_regions_failure_keeps_old_map(auth_service, token_store):
    directory = AsyncMock()
    directory.get_region_city_map = lambda: {"Old": ["X"]}
    directory.fetch_region_city_map.side_effect = DirectoryError("offline")
    vm = SignupViewModel(auth_service, token_store, directory)

    await vm.load_regions()
    assert vm.state.regions == ["Old"]
    assert vm.state.is_loading_regions is False
    assert vm.state.regions_error == "Could not load regions"
    assert vm.state.submission_error is None


@pytest.mark.asyncio
async def test_region_failure_during_submit_does_not_touch_submission(auth_service, token_store):
    """A failed directory refresh mid-submit reports on its own field only."""
    gate = asyncio.Event()

    async def slow_signup(request):
        await gate.wait()
        return SignupSuccess(token="tok1")

    auth_service.signup.side_effect = slow_signup
    directory = AsyncMock()
    directory.get_region_city_map = lambda: dict(DEFAULT_REGION_CITY_MAP)
    directory.fetch_region_city_map.side_effect = DirectoryError("offline")
    vm = SignupViewModel(auth_service, token_store, directory)

    seen = []
    vm.subscribe(seen.append)
    vm.set_name("Abel")
    vm.set_email("a@b.com")
    vm.set_password("secret1")
    vm.select_region("Amhara")
    vm.select_city("Bahir Dar")

    task = vm.submit()
    await vm.load_regions()
    assert vm.state.submission_in_flight is True
    assert vm.state.submission_error is None
    assert vm.state.regions_error == "Could not load regions"

    gate.set()
    await task
    assert vm.state.submission_succeeded is True
    assert vm.state.submission_error is None
    for state in seen:
        if state.submission_in_flight:
            assert state.submission_error is None
            assert state.submission_succeeded is False
