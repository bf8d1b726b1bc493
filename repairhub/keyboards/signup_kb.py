"""Inline keyboard builders for the signup conversation."""

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from repairhub.schemas import ROLES

ROLE_LABELS = {
    "Citizen": "🏠 Citizen",
    "Repair Team": "🛠️ Repair Team",
}


def role_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text=ROLE_LABELS.get(role, role), callback_data=f"signup_role_{i}")]
        for i, role in enumerate(ROLES)
    ])


def region_keyboard(regions: list[str]) -> InlineKeyboardMarkup:
    """One button per region; indexes keep callback data under Telegram's 64-byte limit."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text=f"📍 {region}", callback_data=f"signup_region_{i}")]
        for i, region in enumerate(regions)
    ])


def city_keyboard(cities: list[str]) -> InlineKeyboardMarkup:
    buttons = [
        [InlineKeyboardButton(text=f"🏙️ {city}", callback_data=f"signup_city_{i}")]
        for i, city in enumerate(cities)
    ]
    buttons.append([InlineKeyboardButton(text="◀️ Change Region", callback_data="signup_pick_region")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def photo_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="⏩ Skip", callback_data="signup_skip_photo")],
    ])


def confirm_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="✅ Create Account", callback_data="signup_submit"),
            InlineKeyboardButton(text="✏️ Start Over", callback_data="signup_restart"),
        ],
    ])


def retry_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🔄 Try Again", callback_data="signup_submit")],
        [InlineKeyboardButton(text="✏️ Start Over", callback_data="signup_restart")],
    ])
