"""Blood Donation Coordination Platform - Backend.

A small REST/JSON service:
- Users register (or sign in through a social identity provider) and become donors.
- Donors, volunteers and admins post and manage donation requests.
- Anyone can search active donors by blood group and location.
- Authenticated users contribute to the fund.

See README for setup and usage.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
