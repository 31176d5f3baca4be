"""
Attribution Code Codec

Generates and verifies the signed short codes passed to Telegram bots as
their start parameter.

Code format: {payload}{signature}
- payload: 16 random bytes, base64url without padding (22 chars)
- signature: HMAC-SHA256 over the payload, base64url, first 8 chars
Total: 30 chars, well under Telegram's 64-char start parameter limit.

Design Decisions:
- Codes are self-authenticating: tampering is detected without a storage
  lookup, so forged codes are rejected in O(1)
- The secret is injected per instance (no module-level state), which keeps
  tests isolated
- Signatures are compared with hmac.compare_digest (constant time)
"""

import base64
import hashlib
import hmac
import re
import secrets

from tg_redirect.core.exceptions import CodeGenerationError

MAX_CODE_LENGTH = 64
RANDOM_BYTES = 16
SIGNATURE_LENGTH = 8
MIN_PAYLOAD_LENGTH = 10

CODE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class CodeCodec:
    """
    Signs and verifies attribution codes with a process-wide secret.

    Usage:
        codec = CodeCodec(settings.CODE_SIGNING_SECRET)
        code = codec.generate()
        assert codec.verify(code)
    """

    def __init__(self, secret: str):
        if not secret:
            raise CodeGenerationError("Code signing secret must not be empty")
        self._key = secret.encode("utf-8")

    def _sign(self, payload: str) -> str:
        digest = hmac.new(self._key, payload.encode("ascii"), hashlib.sha256).digest()
        return _b64url(digest)[:SIGNATURE_LENGTH]

    def generate(self) -> str:
        """
        Generate a new signed code.

        Returns:
            URL-safe code string

        Raises:
            CodeGenerationError: If the code would exceed MAX_CODE_LENGTH
        """
        payload = _b64url(secrets.token_bytes(RANDOM_BYTES))
        code = payload + self._sign(payload)

        if len(code) > MAX_CODE_LENGTH:
            raise CodeGenerationError(f"Generated code exceeds maximum length: {len(code)}")

        return code

    @staticmethod
    def is_well_formed(code: str) -> bool:
        """
        Cheap syntactic check run before any cryptographic work.

        Non-empty, at most 64 characters, only [A-Za-z0-9_-].
        """
        if not code or not isinstance(code, str):
            return False
        if len(code) > MAX_CODE_LENGTH:
            return False
        return CODE_PATTERN.fullmatch(code) is not None

    def verify(self, code: str) -> bool:
        """
        Check a code's signature.

        Returns:
            True only for well-formed codes whose trailing signature matches
            the payload; False on any length or format mismatch
        """
        if not self.is_well_formed(code):
            return False
        if len(code) < SIGNATURE_LENGTH + MIN_PAYLOAD_LENGTH:
            return False

        payload = code[:-SIGNATURE_LENGTH]
        signature = code[-SIGNATURE_LENGTH:]
        return hmac.compare_digest(self._sign(payload), signature)
