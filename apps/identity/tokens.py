"""One-time link tokens for account emails."""
from django.contrib.auth.tokens import PasswordResetTokenGenerator


class EmailConfirmationTokenGenerator(PasswordResetTokenGenerator):
    """
    Signup confirmation links. The salt keeps these tokens from passing as
    password reset tokens, and the hash covers email_verified so a link
    stops working once the address is confirmed.
    """
    key_salt = "apps.identity.tokens.EmailConfirmationTokenGenerator"

    def _make_hash_value(self, user, timestamp):
        return f"{user.pk}{user.email}{user.email_verified}{timestamp}"


email_confirmation_token = EmailConfirmationTokenGenerator()
