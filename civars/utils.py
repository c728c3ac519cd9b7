"""
Utility functions for civars.

Helpers for keeping credentials out of logs.
"""

from __future__ import annotations

import re


def get_token_last4(token: str) -> str:
    """Get last 4 characters of token for display"""
    return token[-4:] if len(token) >= 8 else "***"


def mask_sensitive_data(text: str) -> str:
    """Mask sensitive data in logs"""
    # GitLab PAT pattern: glpat-xxxxx
    text = re.sub(r'glpat-[A-Za-z0-9_-]+', 'glpat-****', text)

    # private_token query parameter
    text = re.sub(r'(private_token=)[^&\s]+', r'\1****', text)

    # Generic Bearer tokens
    text = re.sub(r'Bearer [A-Za-z0-9._-]+', 'Bearer ****', text)

    return text
