"""Store service layer.

Views, the admin and the management commands call these functions
instead of manipulating models directly.
"""
