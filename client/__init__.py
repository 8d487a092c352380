"""
Registration Portal clients

- registration_form: validate and submit a registration
- admin_dashboard: list/search/filter/paginate registrations and merge live pushes
"""

__version__ = "1.0.0"
