"""
Purpose: Unlock check for the Precision routing provider.

The passkey gate is an application rule, not something the resolver needs to
work: callers run `unlock_precision` once and hand the boolean to the resolver
as a capability flag.
"""

import hmac
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def unlock_precision(passkey: Optional[str], expected: Optional[str] = None) -> bool:
    """
    Compares `passkey` with PRECISION_PASSKEY (or `expected`) in constant time.
    Always False when no passkey is configured.
    """
    expected = expected if expected is not None else os.getenv("PRECISION_PASSKEY")
    if not expected or not passkey:
        return False
    return hmac.compare_digest(passkey.strip().encode(), expected.encode())
