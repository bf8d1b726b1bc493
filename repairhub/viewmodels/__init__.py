from repairhub.viewmodels.signup import SignupUiState, SignupViewModel, validate_signup

__all__ = ["SignupUiState", "SignupViewModel", "validate_signup"]
