"""
Signup Bot Handler — guided account creation backed by ``SignupViewModel``.

Flow:
  /signup → 1. Name → 2. Email → 3. Password → 4. Role → 5. Region
  → 6. City → 7. Photo (optional) → Review → Submit

Handlers only translate Telegram updates into view-model intents and render
the resulting state; validation and the submission itself live in the
view-model.
"""

import html
import logging

from aiogram import Router, F
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, CallbackQuery

from repairhub.keyboards.signup_kb import (
    ROLE_LABELS, role_keyboard, region_keyboard, city_keyboard,
    photo_keyboard, confirm_keyboard, retry_keyboard,
)
from repairhub.navigation import home_for_role
from repairhub.schemas import ROLES
from repairhub.sessions import SignupSessions
from repairhub.states.signup_states import SignupFlow
from repairhub.viewmodels.signup import SignupUiState

router = Router()
logger = logging.getLogger(__name__)


def summary_text(state: SignupUiState) -> str:
    """Review message shown before submission."""
    return (
        "━━━━━━━━━━━━━━━━━━━━━━\n"
        "📋 <b>Account Summary</b>\n"
        "━━━━━━━━━━━━━━━━━━━━━━\n\n"
        f"👤 <b>Name:</b> {html.escape(state.name)}\n"
        f"📧 <b>Email:</b> {html.escape(state.email)}\n"
        f"🔒 <b>Password:</b> {'•' * len(state.password)}\n"
        f"🎭 <b>Role:</b> {ROLE_LABELS.get(state.selected_role, state.selected_role)}\n"
        f"📍 <b>Region:</b> {html.escape(state.selected_region)}\n"
        f"🏙️ <b>City:</b> {html.escape(state.selected_city)}\n"
        f"🖼️ <b>Photo:</b> {'✅ Attached' if state.picked_image else 'Skipped'}\n\n"
        "Does everything look correct?"
    )


def error_text(state: SignupUiState) -> str:
    return (
        "⚠️ <b>Signup Failed</b>\n\n"
        f"{html.escape(state.submission_error or 'Signup failed')}"
    )


# ── Entry Point ───────────────────────────────────────────

@router.message(Command("signup"))
async def cmd_signup(message: Message, state: FSMContext, sessions: SignupSessions):
    """Start (or restart) the signup conversation."""
    sessions.start(message.chat.id)
    await state.set_state(SignupFlow.name)
    await message.answer(
        "━━━━━━━━━━━━━━━━━━━━━━\n"
        "🛠️ <b>Community Repair Hub</b>\n"
        "━━━━━━━━━━━━━━━━━━━━━━\n\n"
        "Let's create your account.\n\n"
        "<b>Step 1/7:</b> What is your <b>full name</b>?",
    )


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext, sessions: SignupSessions):
    """Abandon the form."""
    if message.chat.id in sessions:
        sessions.get(message.chat.id).reset_form()
        sessions.drop(message.chat.id)
    await state.clear()
    await message.answer("❌ Signup cancelled. Send /signup to start again.")


@router.callback_query(F.data == "signup_restart")
async def restart_signup(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    await callback.answer()
    sessions.start(callback.message.chat.id)
    await state.set_state(SignupFlow.name)
    await callback.message.edit_text(
        "✏️ <b>Let's start over.</b>\n\n"
        "<b>Step 1/7:</b> What is your <b>full name</b>?",
    )


# ── Steps 1-3: Text fields ────────────────────────────────

@router.message(SignupFlow.name)
async def process_name(message: Message, state: FSMContext, sessions: SignupSessions):
    vm = sessions.get(message.chat.id)
    vm.set_name((message.text or "").strip())
    await state.set_state(SignupFlow.email)
    await message.answer(
        f"👍 Hi <b>{html.escape(vm.state.name)}</b>!\n\n"
        "<b>Step 2/7:</b> Enter your <b>email address</b>:",
    )


@router.message(SignupFlow.email)
async def process_email(message: Message, state: FSMContext, sessions: SignupSessions):
    sessions.get(message.chat.id).set_email((message.text or "").strip())
    await state.set_state(SignupFlow.password)
    await message.answer(
        "<b>Step 3/7:</b> Choose a <b>password</b> (at least 6 characters).\n\n"
        "🔒 <i>Your message will be removed from the chat.</i>",
    )


@router.message(SignupFlow.password)
async def process_password(message: Message, state: FSMContext, sessions: SignupSessions):
    sessions.get(message.chat.id).set_password(message.text or "")
    try:
        await message.delete()
    except Exception as e:
        logger.warning("Could not delete password message: %s", e)
    await state.set_state(SignupFlow.role)
    await message.answer(
        "<b>Step 4/7:</b> How will you use Repair Hub?",
        reply_markup=role_keyboard(),
    )


# ── Step 4: Role ──────────────────────────────────────────

@router.callback_query(F.data.startswith("signup_role_"), SignupFlow.role)
async def process_role(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    await callback.answer()
    index = int(callback.data.removeprefix("signup_role_"))
    vm = sessions.get(callback.message.chat.id)
    vm.set_role(ROLES[index])
    await _show_regions(callback, state, sessions)


# ── Step 5: Region ────────────────────────────────────────

async def _show_regions(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    vm = sessions.get(callback.message.chat.id)
    vm.toggle_city_dropdown(False)
    vm.toggle_region_dropdown(True)
    await state.set_state(SignupFlow.region)

    if not vm.state.regions:
        await vm.load_regions()

    if not vm.state.regions:
        await callback.message.edit_text(
            "⚠️ No regions are available right now. Please try again later.",
        )
        return

    await callback.message.edit_text(
        "<b>Step 5/7:</b> Select your <b>region</b>:",
        reply_markup=region_keyboard(vm.state.regions),
    )


@router.callback_query(F.data == "signup_pick_region")
async def pick_region_again(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    await callback.answer()
    await _show_regions(callback, state, sessions)


@router.callback_query(F.data.startswith("signup_region_"), SignupFlow.region)
async def process_region(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    await callback.answer()
    vm = sessions.get(callback.message.chat.id)
    index = int(callback.data.removeprefix("signup_region_"))
    if index >= len(vm.state.regions):
        await _show_regions(callback, state, sessions)
        return

    vm.select_region(vm.state.regions[index])
    vm.toggle_city_dropdown(True)
    await state.set_state(SignupFlow.city)
    await callback.message.edit_text(
        f"✅ Region: {html.escape(vm.state.selected_region)}\n\n"
        "<b>Step 6/7:</b> Select your <b>city</b>:",
        reply_markup=city_keyboard(vm.state.cities),
    )


# ── Step 6: City ──────────────────────────────────────────

@router.callback_query(F.data.startswith("signup_city_"), SignupFlow.city)
async def process_city(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    await callback.answer()
    vm = sessions.get(callback.message.chat.id)
    index = int(callback.data.removeprefix("signup_city_"))
    if index >= len(vm.state.cities):
        await _show_regions(callback, state, sessions)
        return

    vm.select_city(vm.state.cities[index])
    await state.set_state(SignupFlow.photo)
    await callback.message.edit_text(
        f"✅ City: {html.escape(vm.state.selected_city)}\n\n"
        "<b>Step 7/7:</b> Optionally, send a <b>profile photo</b>.",
        reply_markup=photo_keyboard(),
    )


# ── Step 7: Photo (optional) ──────────────────────────────

@router.message(SignupFlow.photo, F.photo)
async def process_photo(message: Message, state: FSMContext, sessions: SignupSessions):
    vm = sessions.get(message.chat.id)
    vm.pick_image(message.photo[-1].file_id)
    await state.set_state(SignupFlow.confirm)
    await message.answer(summary_text(vm.state), reply_markup=confirm_keyboard())


@router.message(SignupFlow.photo)
async def photo_invalid(message: Message):
    await message.answer(
        "⚠️ Please send a <b>photo</b>, or tap Skip.",
        reply_markup=photo_keyboard(),
    )


@router.callback_query(F.data == "signup_skip_photo", SignupFlow.photo)
async def skip_photo(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    await callback.answer()
    vm = sessions.get(callback.message.chat.id)
    await state.set_state(SignupFlow.confirm)
    await callback.message.edit_text(summary_text(vm.state), reply_markup=confirm_keyboard())


# ── Submit ────────────────────────────────────────────────

@router.callback_query(F.data == "signup_submit", SignupFlow.confirm)
async def submit_signup(callback: CallbackQuery, state: FSMContext, sessions: SignupSessions):
    """Hand the form to the view-model and render the terminal outcome."""
    chat_id = callback.message.chat.id
    vm = sessions.get(chat_id)

    task = vm.submit()
    if task is None:
        if vm.state.submission_in_flight:
            await callback.answer("Already submitting...")
            return
        # Validation rejected the form before anything was sent
        await callback.answer()
        await callback.message.edit_text(error_text(vm.state), reply_markup=retry_keyboard())
        vm.reset_signup_status()
        return

    await callback.answer("Submitting...")
    await callback.message.edit_text("⏳ Creating your account...")
    await task

    result = vm.state
    if result.submission_succeeded:
        landing = home_for_role(result.selected_role)
        logger.info("Signup completed: chat_id=%s landing=%s", chat_id, landing.route)
        await state.clear()
        sessions.drop(chat_id)
        await callback.message.edit_text(
            "━━━━━━━━━━━━━━━━━━━━━━\n"
            "🎉 <b>Account Created!</b>\n"
            "━━━━━━━━━━━━━━━━━━━━━━\n\n"
            f"Welcome, <b>{html.escape(result.name)}</b>!\n"
            f"Opening <b>{landing.route}</b>.",
        )
    else:
        logger.warning("Signup failed: chat_id=%s error=%s", chat_id, result.submission_error)
        await callback.message.edit_text(error_text(result), reply_markup=retry_keyboard())
        vm.reset_signup_status()
