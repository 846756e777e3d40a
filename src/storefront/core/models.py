"""Core models for the Storefront API.

These are the only tables Django manages; everything else lives in the
OpenCart schema.
"""

import hashlib
import hmac
import secrets

from django.db import models
from django.utils import timezone


def hash_secret(secret: str) -> str:
    return hashlib.sha256(secret.encode()).hexdigest()


class ApiTokenManager(models.Manager):
    """Manager that issues and resolves bearer tokens."""

    def issue(self, customer_id, scopes, name="api"):
        """Create a token and return ``(token, plaintext)``.

        The plaintext is ``"<id>|<secret>"`` and is never stored.
        """
        secret = secrets.token_hex(20)
        token = self.create(
            customer_id=customer_id,
            name=name,
            scopes=list(scopes),
            token_hash=hash_secret(secret),
        )
        return token, f"{token.pk}|{secret}"

    def resolve(self, plaintext):
        """Return the token matching a plaintext bearer value, or None."""
        token_id, sep, secret = plaintext.partition("|")
        if not sep or not token_id.isdigit() or not secret:
            return None
        token = self.filter(pk=int(token_id)).first()
        if token is None or not hmac.compare_digest(token.token_hash, hash_secret(secret)):
            return None
        return token


class ApiToken(models.Model):
    """Personal access token for an OpenCart customer."""

    SCOPE_USER = "user"
    SCOPE_ADMIN = "admin"

    customer_id = models.PositiveIntegerField(db_index=True)
    name = models.CharField(max_length=100, default="api")
    token_hash = models.CharField(max_length=64, unique=True)
    scopes = models.JSONField(default=list)
    last_used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ApiTokenManager()

    class Meta:
        db_table = "api_tokens"
        verbose_name = "API token"
        verbose_name_plural = "API tokens"

    def __str__(self):
        return f"{self.name} ({self.customer_id})"

    def can(self, scope):
        return scope in self.scopes

    def touch(self):
        self.last_used_at = timezone.now()
        self.save(update_fields=["last_used_at"])


class PasswordResetToken(models.Model):
    """Pending password reset for a customer email."""

    email = models.CharField(max_length=96, primary_key=True)
    token_hash = models.CharField(max_length=64)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "password_reset_tokens"

    def __str__(self):
        return self.email

    def matches(self, token):
        return hmac.compare_digest(self.token_hash, hash_secret(token))
