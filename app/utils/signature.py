"""
Interaction request signature verification.

Discord signs every interaction with Ed25519 over the request timestamp
concatenated with the raw body. Verification must happen on the raw bytes,
before the body is parsed.
"""

from typing import Optional, Union

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from app.utils.logging import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def verify_interaction_signature(
    public_key_hex: Optional[str],
    signature_hex: Optional[str],
    timestamp: Optional[str],
    raw_body: Union[bytes, str],
) -> bool:
    """
    Verify that an interaction request was produced by the chat platform.

    Args:
        public_key_hex: Application public key, hex encoded
        signature_hex: Value of the signature header, hex encoded
        timestamp: Value of the timestamp header
        raw_body: Exact request body as received

    Returns:
        True only if the signature is valid; any failure (missing input,
        malformed hex, wrong key length, bad signature) returns False
    """
    if not public_key_hex or not signature_hex or not timestamp:
        return False

    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")

    try:
        verify_key = VerifyKey(bytes.fromhex(public_key_hex))
        verify_key.verify(timestamp.encode("utf-8") + raw_body, bytes.fromhex(signature_hex))
        return True
    except BadSignatureError:
        logger.warning("Interaction signature mismatch")
        return False
    except Exception as e:
        logger.warning(f"Interaction signature could not be checked: {e}")
        return False
