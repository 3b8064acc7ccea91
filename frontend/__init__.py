"""
Faculty Roles dashboard - Flask frontend listing open faculty roles.

Provides the listings page with a division filter, a JSON API over the
dashboard service and token-protected admin endpoints.
"""
