"""FSM states for the signup conversation."""

from aiogram.fsm.state import StatesGroup, State


class SignupFlow(StatesGroup):
    """Signup state machine: 7 steps plus review."""
    name = State()
    email = State()
    password = State()
    role = State()
    region = State()
    city = State()
    photo = State()
    confirm = State()
