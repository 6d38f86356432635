# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Helpers: OTP acquisition."""

from .otp import OtpProvider, validate_otp

__all__ = ["OtpProvider", "validate_otp"]
